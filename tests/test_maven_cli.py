import asyncio
import subprocess
from pathlib import Path

import pytest

from maven_stream_deploy import DeployConfig, DeployError, Settings, StreamedFile, build_file_options
from maven_stream_deploy.deploy import MavenCliDeployer


def build_settings(tmp_path, **overrides) -> Settings:
    defaults = {"staging_dir": str(tmp_path / "staging"), "mvn_executable": "mvn"}
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def build_options(name="fileA.txt", **overrides):
    data = {
        "groupId": "com.mygroup",
        "version": "1.0.0",
        "repositories": [{"id": "some-repo-id", "url": "http://some-repo/url"}],
    }
    data.update(overrides)
    return build_file_options(StreamedFile(path=Path("/src") / name), DeployConfig.from_mapping(data))


@pytest.fixture
def mvn_calls(monkeypatch):
    calls = []

    def fake_run(cmd, *_, **__):
        calls.append(list(cmd))
        return subprocess.CompletedProcess(cmd, 0, stdout="[INFO] BUILD SUCCESS", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_deploy_runs_deploy_file_goal(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path))
    deployer.configure(build_options())

    asyncio.run(deployer.deploy("some-repo-id", tmp_path / "staged.txt"))

    assert mvn_calls == [
        [
            "mvn",
            "-B",
            "deploy:deploy-file",
            f"-Dfile={tmp_path / 'staged.txt'}",
            "-DgroupId=com.mygroup",
            "-DartifactId=fileA",
            "-Dversion=1.0.0",
            "-Dpackaging=txt",
            "-DgeneratePom=true",
            "-DrepositoryId=some-repo-id",
            "-Durl=http://some-repo/url",
        ]
    ]


def test_install_runs_install_file_goal(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path, mvn_settings_file="/etc/m2/settings.xml"))
    deployer.configure(build_options(classifier="sources", generatePom=False))

    asyncio.run(deployer.install(tmp_path / "staged.txt"))

    command = mvn_calls[0]
    assert command[:4] == ["mvn", "-B", "-s", "/etc/m2/settings.xml"]
    assert command[4] == "install:install-file"
    assert "-Dclassifier=sources" in command
    assert "-DgeneratePom=false" in command
    assert not any(arg.startswith("-DrepositoryId") for arg in command)


def test_snapshot_appends_suffix_once(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path))
    deployer.configure(build_options())
    asyncio.run(deployer.deploy("some-repo-id", tmp_path / "a.txt", True))

    deployer.configure(build_options(version="2.0.0-SNAPSHOT"))
    asyncio.run(deployer.deploy("some-repo-id", tmp_path / "a.txt", True))

    assert "-Dversion=1.0.0-SNAPSHOT" in mvn_calls[0]
    assert "-Dversion=2.0.0-SNAPSHOT" in mvn_calls[1]


def test_version_falls_back_to_settings(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path, default_version="3.1.4"))
    deployer.configure(build_options(version=None))

    asyncio.run(deployer.install(tmp_path / "a.txt"))

    assert "-Dversion=3.1.4" in mvn_calls[0]


def test_command_is_captured_when_call_is_issued(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path))
    deployer.configure(build_options("fileA.txt"))
    pending = deployer.deploy("some-repo-id", tmp_path / "a.txt")
    deployer.configure(build_options("fileB.zip"))

    asyncio.run(pending)

    assert "-DartifactId=fileA" in mvn_calls[0]
    assert "-Dpackaging=txt" in mvn_calls[0]


def test_non_zero_exit_raises_with_maven_error(tmp_path, monkeypatch):
    def fake_run(cmd, *_, **__):
        stdout = "[INFO] Scanning\n[ERROR] Failed to deploy artifacts: Could not transfer artifact\n"
        return subprocess.CompletedProcess(cmd, 1, stdout=stdout, stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    deployer = MavenCliDeployer(build_settings(tmp_path))
    deployer.configure(build_options())

    with pytest.raises(DeployError, match="Failed to deploy artifacts") as excinfo:
        asyncio.run(deployer.deploy("some-repo-id", tmp_path / "a.txt"))

    assert "[INFO] Scanning" in excinfo.value.output


def test_timeout_raises_deploy_error(tmp_path, monkeypatch):
    def fake_run(cmd, *_, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

    monkeypatch.setattr(subprocess, "run", fake_run)
    deployer = MavenCliDeployer(build_settings(tmp_path, mvn_timeout=5))
    deployer.configure(build_options())

    with pytest.raises(DeployError, match="timed out after 5s"):
        asyncio.run(deployer.install(tmp_path / "a.txt"))


def test_missing_executable_raises_deploy_error(tmp_path, monkeypatch):
    def fake_run(cmd, *_, **__):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)
    deployer = MavenCliDeployer(build_settings(tmp_path, mvn_executable="/opt/no-mvn"))
    deployer.configure(build_options())

    with pytest.raises(DeployError, match="Unable to run /opt/no-mvn"):
        asyncio.run(deployer.install(tmp_path / "a.txt"))


def test_rejects_unknown_repository(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path))
    deployer.configure(build_options())

    with pytest.raises(DeployError, match="Unknown repository id 'elsewhere'"):
        deployer.deploy("elsewhere", tmp_path / "a.txt")

    assert mvn_calls == []


def test_requires_group_id_and_version(tmp_path, mvn_calls):
    deployer = MavenCliDeployer(build_settings(tmp_path))

    deployer.configure(build_options(groupId=None))
    with pytest.raises(DeployError, match="Missing groupId"):
        deployer.install(tmp_path / "a.txt")

    deployer.configure(build_options(version=None))
    with pytest.raises(DeployError, match="Missing artifact version"):
        deployer.install(tmp_path / "a.txt")


def test_requires_configure_first(tmp_path):
    with pytest.raises(DeployError, match="before configure"):
        MavenCliDeployer(build_settings(tmp_path)).install(tmp_path / "a.txt")
