import subprocess
import sys

import yaml


def run_cli_command(*args):
    return subprocess.run(
        [sys.executable, "-m", "platformctl.cli", *args],
        capture_output=True,
        text=True,
    )


def test_help():
    result = run_cli_command("--help")
    assert result.returncode == 0
    assert "Usage" in result.stdout
    for group in ("compose", "lookup", "config", "serve"):
        assert group in result.stdout


def test_lookup_max_pods():
    result = run_cli_command("lookup", "max-pods", "c5.large", "m5.xlarge")
    assert result.returncode == 0
    assert "c5.large: 29" in result.stdout
    assert "m5.xlarge: 58" in result.stdout
    assert "effective: 29" in result.stdout


def test_lookup_max_pods_unknown_type():
    result = run_cli_command("lookup", "max-pods", "p5.48xlarge", "--default", "50")
    assert "p5.48xlarge: 50 (default)" in result.stdout


def test_lookup_shim():
    assert "kubectl-v34" in run_cli_command("lookup", "shim", "1.34").stdout
    result = run_cli_command("lookup", "shim", "1.32")
    assert result.returncode == 1


def test_compose_platform_to_stdout(platform_file):
    result = run_cli_command("compose", "platform", str(platform_file))
    assert result.returncode == 0, result.stderr
    data = yaml.safe_load(result.stdout)
    assert data["cluster"]["kubectlShim"] == "kubectl-v33"
    assert [ng["name"] for ng in data["nodeGroups"]] == ["al2023", "windows"]


def test_compose_platform_to_file(platform_file, tmp_path):
    output = tmp_path / "out" / "descriptor.json"
    result = run_cli_command("compose", "platform", str(platform_file), "--output", str(output), "--format", "json")
    assert result.returncode == 0, result.stderr
    assert output.exists()
    assert "Descriptor written" in result.stdout


def test_compose_invalid_file(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("name: demo\n")
    result = run_cli_command("compose", "platform", str(path))
    assert result.returncode == 1
    assert "network" in result.stderr


def test_compose_graph(platform_file):
    result = run_cli_command("compose", "graph", str(platform_file))
    assert result.returncode == 0, result.stderr
    before, after = result.stdout.split("Tier 1")
    assert "vpc-cni" in before
    assert "snapshot-controller" in before
    assert "coredns (after: al2023, windows)" in after
