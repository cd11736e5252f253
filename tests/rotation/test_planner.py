import base64

import pytest

from certrot.cluster.nodes import Node, RoleShape, role_shape
from certrot.config.models import ControlPlane, ControlPlaneSpec, ControlPlaneStatus, RotateCertificates
from certrot.rotation.planner import build_plan
from certrot.rotation.script import IDEMPOTENT_ROTATE_SCRIPT

SCRIPT_PATH = "/var/lib/rancher/rke2/certificate_rotation/bin/rotate.sh"


def _cp(version="v1.28.5+rke2r1", generation=7, services=None):
    rotation = RotateCertificates(generation=generation, services=services or [])
    return ControlPlane(
        name="edge-1",
        spec=ControlPlaneSpec(kubernetes_version=version, rotate_certificates=rotation),
        status=ControlPlaneStatus(initialized=True, certificate_rotation_generation=generation - 1),
    )


def _node(*roles, name="n"):
    return Node(machine_name=name, roles=frozenset(roles), address="10.0.0.1")


def _build(cp, node):
    return build_plan(cp, cp.spec.rotate_certificates, node)


def test_worker_only_restarts_agent():
    plan = _build(_cp(), _node("worker"))
    assert plan.files == []
    assert len(plan.instructions) == 1
    restart = plan.instructions[0]
    assert restart.command == "systemctl"
    assert restart.args == ["restart", "rke2-agent"]


def test_controlplane_rotates_then_restarts_server():
    cp = _cp(generation=7, services=["etcd", "kube-apiserver"])
    plan = _build(cp, _node("controlplane"))

    assert len(plan.files) == 1
    assert plan.files[0].path == SCRIPT_PATH
    assert plan.files[0].content == base64.b64encode(IDEMPOTENT_ROTATE_SCRIPT.encode()).decode()

    rotate, restart = plan.instructions
    assert rotate.name == "rotate certificates"
    assert rotate.command == "sh"
    assert rotate.args == [
        "-xe", SCRIPT_PATH, "rke2", "7",
        "-s", "etcd", "-s", "kube-apiserver",
    ]
    assert restart.args == ["restart", "rke2-server"]


def test_no_services_means_no_scoping_flags():
    plan = _build(_cp(generation=3), _node("etcd"))
    assert plan.instructions[0].args == ["-xe", SCRIPT_PATH, "rke2", "3"]


def test_k3s_units_and_paths():
    cp = _cp(version="v1.27.9+k3s1", generation=2)
    server = _build(cp, _node("etcd", "controlplane"))
    worker = _build(cp, _node("worker"))

    assert server.files[0].path == "/var/lib/rancher/k3s/certificate_rotation/bin/rotate.sh"
    assert server.instructions[0].args[2] == "k3s"
    assert server.instructions[1].args == ["restart", "k3s"]
    assert worker.instructions[0].args == ["restart", "k3s-agent"]


@pytest.mark.parametrize("roles", [("etcd",), ("controlplane",), ("etcd", "worker"), ("etcd", "controlplane", "worker")])
def test_any_server_role_gets_rotation_plan(roles):
    assert role_shape(_node(*roles)) is RoleShape.CONTROL_PLANE_OR_ETCD
    plan = _build(_cp(), _node(*roles))
    assert [i.name for i in plan.instructions] == ["rotate certificates", "restart"]


def test_node_without_roles_is_rejected():
    with pytest.raises(ValueError):
        _build(_cp(), _node())


def test_plans_are_deterministic():
    cp = _cp(generation=11, services=["kubelet", "etcd"])
    a = _build(cp, _node("controlplane", name="a"))
    b = _build(cp, _node("controlplane", name="b"))
    assert a == b
    assert a.checksum() == b.checksum()

    reordered = _build(_cp(generation=11, services=["etcd", "kubelet"]), _node("controlplane"))
    assert reordered.checksum() != a.checksum()


def test_script_content_does_not_depend_on_request():
    plans = [
        _build(_cp(generation=g, services=s), _node("etcd"))
        for g, s in [(1, []), (42, ["etcd"]), (9000, ["kube-apiserver", "kubelet"])]
    ]
    for plan in plans:
        assert plan.files[0].decoded().decode() == IDEMPOTENT_ROTATE_SCRIPT
