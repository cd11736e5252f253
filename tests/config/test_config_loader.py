from pathlib import Path
import textwrap

import pytest

from certrot.config.loader import load_config
from certrot.errors import ConfigError

CONFIG = textwrap.dedent("""
    environment: prod
    control_plane:
      name: edge-1
      spec:
        kubernetes_version: v1.28.5+rke2r1
        rotate_certificates:
          generation: 4
          services: [etcd, kube-apiserver]
      status:
        initialized: true
        certificate_rotation_generation: 3
    nodes:
      - name: cp-1
        address: 10.0.0.11
        roles: [etcd, controlplane]
      - name: worker-1
        address: ${WORKER_ADDR}
        roles: [worker]
        username: ubuntu
""")


@pytest.fixture(autouse=True)
def _no_overrides_env(monkeypatch):
    monkeypatch.delenv("CERTROT_OVERRIDES_FILE", raising=False)
    monkeypatch.setenv("WORKER_ADDR", "10.0.0.21")


def _write(tmp_path: Path, text: str = CONFIG, name: str = "cluster.yaml") -> Path:
    f = tmp_path / name
    f.write_text(text)
    return f


def test_load_config_ok(tmp_path: Path):
    cfg = load_config(_write(tmp_path))
    cp = cfg.control_plane
    assert cfg.environment == "prod"
    assert cp.spec.rotate_certificates.services == ["etcd", "kube-apiserver"]
    assert cp.status.initialized is True
    assert cp.status.certificate_rotation_generation == 3

    nodes = cfg.cluster_plan().nodes
    assert [n.machine_name for n in nodes] == ["cp-1", "worker-1"]
    assert nodes[0].roles == frozenset({"etcd", "controlplane"})
    assert nodes[1].address == "10.0.0.21"


def test_ssh_defaults_fill_unset_node_fields(tmp_path: Path):
    cfg = load_config(_write(tmp_path, CONFIG + "ssh:\n  username: builder\n  port: 2222\n"))
    cp1, worker = cfg.cluster_plan().nodes
    assert (cp1.username, cp1.port) == ("builder", 2222)
    assert (worker.username, worker.port) == ("ubuntu", 2222)


def test_overrides_file_beside_config_is_merged(tmp_path: Path):
    _write(tmp_path, "ssh:\n  pkey_path: /keys/id_ed25519\n", name="overrides.yaml")
    cfg = load_config(_write(tmp_path))
    assert cfg.ssh.pkey_path == "/keys/id_ed25519"
    assert cfg.control_plane.name == "edge-1"


def test_overrides_env_var_wins(tmp_path: Path, monkeypatch):
    _write(tmp_path, "ssh:\n  pkey_path: /beside\n", name="overrides.yaml")
    elsewhere = tmp_path / "secret"
    elsewhere.mkdir()
    explicit = _write(elsewhere, "ssh:\n  password: s3cret\n", name="creds.yaml")
    monkeypatch.setenv("CERTROT_OVERRIDES_FILE", str(explicit))

    cfg = load_config(_write(tmp_path))
    assert cfg.ssh.password == "s3cret"
    assert cfg.ssh.pkey_path is None


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_unknown_role_rejected(tmp_path: Path):
    bad = CONFIG.replace("roles: [worker]", "roles: [gateway]")
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, bad))


def test_rotation_block_is_optional(tmp_path: Path):
    text = textwrap.dedent("""
        control_plane:
          name: edge-1
          spec:
            kubernetes_version: v1.28.5+rke2r1
    """)
    cfg = load_config(_write(tmp_path, text))
    assert cfg.control_plane.spec.rotate_certificates is None
    assert cfg.control_plane.status.initialized is False
    assert cfg.nodes == []
