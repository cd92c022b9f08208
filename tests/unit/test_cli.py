from src.cluster import main


CSV = (
    "country_or_area,year,indicator,series,value\n"
    "Country1,2020,Indicator1,Series1,10.0\n"
    "Country2,2020,Indicator2,Series2,20.0\n"
)


def test_main_prints_summary(tmp_path, monkeypatch, capsys):
    data = tmp_path / "education.csv"
    data.write_text(CSV)
    monkeypatch.setenv("DATA_PATH", str(data))
    monkeypatch.setenv("N_CLUSTERS", "2")

    assert main(env_file=tmp_path / ".env") == 0
    out = capsys.readouterr().out
    assert "Cluster 0: ['Country1']" in out
    assert "Number of nodes in the graph: 2" in out
    assert "Number of edges in the graph: 2" in out


def test_main_reports_missing_input(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_PATH", str(tmp_path / "missing.csv"))
    assert main(env_file=tmp_path / ".env") == 1


def test_main_reports_invalid_cluster_count(tmp_path, monkeypatch):
    data = tmp_path / "education.csv"
    data.write_text(CSV)
    monkeypatch.setenv("DATA_PATH", str(data))
    monkeypatch.setenv("N_CLUSTERS", "10")
    assert main(env_file=tmp_path / ".env") == 2


def test_log_dir_from_env_file_reaches_module_loggers(tmp_path, detach_file_handlers):
    data = tmp_path / "education.csv"
    data.write_text(CSV)
    logs = tmp_path / "logs"
    env_file = tmp_path / ".env"
    env_file.write_text(f"DATA_PATH={data}\nN_CLUSTERS=2\nLOG_DIR={logs}\n")

    assert main(env_file=env_file) == 0
    written = {p.name for p in logs.iterdir()}
    assert {"cluster.log", "ingest.log", "graph.log", "community.log", "clustering.log"} <= written
    assert "Built graph with 2 nodes" in (logs / "graph.log").read_text()
