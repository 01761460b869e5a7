from demo import scenario
from object_plane.impl.memory import create_memory_object_store


def test_scenario_runs(capsys):
    scenario.main(["--delay", "0"])

    out = capsys.readouterr().out
    assert "=== Step 6: Remove 'dev' ===" in out
    assert "[failed] Cannot remove current branch." in out
    assert "[ok] Removed branch dev." in out
    assert "[INFO] Demo Complete." in out


def test_scenario_leaves_master_rolled_back():
    store = create_memory_object_store()
    scenario.run_scenario(store)

    assert store.branch().names() == ["master"]
    assert store.get("theme").payload == "light"
    assert "initial config" in store.log().message
    assert "dark theme" in store.log().message
