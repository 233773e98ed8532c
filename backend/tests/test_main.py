import uvicorn

import app.main as main


def test_run_serves_on_the_probed_port(monkeypatch):
    probed = []
    served = {}

    def fake_find(preferred, host):
        probed.append((preferred, host))
        return preferred + 1

    def fake_run(app, host, port, log_level):
        served.update(app=app, host=host, port=port)

    monkeypatch.setattr(main, "find_available_port", fake_find)
    monkeypatch.setattr(uvicorn, "run", fake_run)

    assert main.run() == 0
    assert probed == [(main.settings.port, main.settings.host)]
    assert served == {"app": main.app, "host": main.settings.host, "port": main.settings.port + 1}
