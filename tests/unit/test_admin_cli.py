from observability import admin_cli
from storage.settings_store import SettingsStore


def test_set_profile_and_interests(tmp_db, capsys):
    store = SettingsStore(tmp_db)
    dogs = next(row.id for row in store.get_all_interests() if row.name == "Dogs")

    code = admin_cli.main(["--db", tmp_db, "--set-age", "10", "--select", str(dogs), "--status"])
    assert code == 0
    out = capsys.readouterr().out
    assert "child age=10" in out
    assert "Dogs" in out
    assert store.get_child_profile()["age"] == 10

    admin_cli.main(["--db", tmp_db, "--set-gender", "boy", "--deselect", str(dogs)])
    assert store.get_child_profile() == {"age": 10, "gender": "boy"}
    assert store.get_selected_interests() == []


def test_list_interests_marks_selection(tmp_db, capsys):
    store = SettingsStore(tmp_db)
    cats = next(row.id for row in store.get_all_interests() if row.name == "Cats")
    store.update_interest(cats, True)
    admin_cli.main(["--db", tmp_db, "--list-interests"])
    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith("[x]") and line.endswith("Cats") for line in lines)


def test_check_connection_reports_failure(monkeypatch, capsys):
    class Backend:
        def test_connection(self):
            return {"success": False, "provider": "fake", "error": "offline"}

        def usage_stats(self):
            from agents.types import UsageStats

            return UsageStats()

    monkeypatch.setattr("backends.create_backend", lambda cfg, provider=None: Backend())
    assert admin_cli.check_connection("openai") == 1
    assert "offline" in capsys.readouterr().out
