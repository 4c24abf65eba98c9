import csv
import os
import subprocess
import sys


def run(*args, **kwargs):
    cmd = [sys.executable, "-m", "sipsim.cli", *args]
    return subprocess.run(cmd, cwd=os.getcwd(), capture_output=True, text=True, **kwargs)


def test_cli_uptake(tmp_path):
    out_csv = tmp_path / "out.csv"
    proc = run("uptake", "--D", "1e-9", "--size", "1e-4", "--geometry", "sphere", "--csv", str(out_csv))
    assert proc.returncode == 0, proc.stderr
    with open(out_csv, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["time_s", "fraction"]
    assert len(rows) == 102
    assert float(rows[-1][1]) > 0.95


def test_cli_film_prints_summary(tmp_path):
    out_csv = tmp_path / "film.csv"
    proc = run("film", "--c_star", "1", "--D", "1e-9", "--k1", "0.4", "--thickness", "1e-4", "--csv", str(out_csv))
    assert proc.returncode == 0, proc.stderr
    assert "phi=2" in proc.stdout
    assert out_csv.exists()


def test_cli_pde(tmp_path):
    out_csv = tmp_path / "pde.csv"
    proc = run(
        "pde", "--size", "1e-4", "--D_A", "1e-9", "--k2", "1", "--c_B0", "10", "--c_star", "1",
        "--tend", "5", "--cells", "20", "--points", "6", "--csv", str(out_csv),
    )
    assert proc.returncode == 0, proc.stderr
    with open(out_csv, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["t", "loading", "fraction", "flux"]
    assert len(rows) == 7


def test_cli_rejects_bad_parameters():
    proc = run(
        "mecs", "--core_radius", "0", "--shell", "1e-5", "--D_shell", "1e-10", "--K_shell", "1",
        "--D_core", "1e-9", "--m_core", "1", "--k1", "1", "--capacity", "100", "--c_gas", "1", "--k_gas", "0.05",
    )
    assert proc.returncode != 0
    assert "core_radius" in proc.stderr


def test_cli_mecs_prints_summary():
    proc = run(
        "mecs", "--core_radius", "2e-4", "--shell", "2e-5", "--D_shell", "1e-10", "--K_shell", "1",
        "--D_core", "1e-9", "--m_core", "1", "--k1", "1", "--capacity", "100", "--c_gas", "1", "--k_gas", "0.05",
    )
    assert proc.returncode == 0, proc.stderr
    assert "controlling=" in proc.stdout
    assert "t_sat=" in proc.stdout


CHANNEL = [
    "--d", "1e-3", "--length", "0.2", "--u", "0.5", "--D_gas", "1.6e-5", "--coating", "20e-6",
    "--D_coating", "1e-9", "--m_coating", "10", "--k1", "1e4", "--capacity", "100",
]


def test_cli_monolith(tmp_path):
    out_csv = tmp_path / "monolith.csv"
    proc = run("monolith", *CHANNEL, "--points", "11", "--csv", str(out_csv))
    assert proc.returncode == 0, proc.stderr
    assert "efficiency=" in proc.stdout
    with open(out_csv, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["z", "c_ratio"]
    assert len(rows) == 12
    assert float(rows[1][1]) == 1.0


def test_cli_breakthrough(tmp_path):
    out_csv = tmp_path / "breakthrough.csv"
    proc = run("breakthrough", *CHANNEL, "--c_in", "0.4", "--tend", "16", "--cells", "50", "--points", "81", "--csv", str(out_csv))
    assert proc.returncode == 0, proc.stderr
    assert "front_velocity=" in proc.stdout
    assert "not reached" not in proc.stdout
    with open(out_csv, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["t", "c_out_ratio", "mean_loading"]
    assert len(rows) == 82


def test_cli_fit_recovers_diffusivity(tmp_path):
    curve = tmp_path / "curve.csv"
    proc = run("uptake", "--D", "3e-10", "--size", "5e-5", "--geometry", "sphere", "--csv", str(curve))
    assert proc.returncode == 0, proc.stderr
    proc = run("fit", "--csv", str(curve), "--size", "5e-5", "--geometry", "sphere")
    assert proc.returncode == 0, proc.stderr
    fitted = float(proc.stdout.split()[0].split("=")[1])
    assert abs(fitted - 3e-10) < 3e-13


def test_cli_rejects_unknown_log_level():
    proc = run("--log-level", "bogus", "uptake", "--D", "1e-9", "--size", "1e-4")
    assert proc.returncode == 2
    assert "invalid choice" in proc.stderr
    assert "Traceback" not in proc.stderr
