import base64
import json

import pytest

from app import create_app, read_vk
from groth16_serializers import serialize_vk, serialize_proof
from zkmanager.groth16.encoding import proof_to_base64, save_vk, vk_from_base64
from zkmanager.manager import events as ev

from conftest import PUBLIC_INPUT

ADMIN = "0xadmin"


class StubTarget:

    def __init__(self):
        self.counter = None

    def confirm_state(self, counter):
        return self.counter == counter

    def import_state(self, counter):
        self.counter = counter


@pytest.fixture
def app(vk):
    return create_app(config={"ADMINS": ADMIN, "TESTING": True}, vk=vk)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager(app):
    return app.extensions["zk_manager"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == "Ok"


def test_vk_export(client, vk):
    data = client.get("/vk").get_json()
    assert vk_from_base64(data["vk"]) == vk
    assert data["points"]["alpha"] == [str(vk.alpha[0]), str(vk.alpha[1])]


def test_vk_export_constructor_params(client, vk):
    params = client.get("/vk").get_json()["params"]
    assert sorted(params) == sorted([
        "alpha_x", "alpha_y", "beta_x", "beta_y", "gamma_x", "gamma_y",
        "delta_x", "delta_y", "gamma_abc0_x", "gamma_abc0_y", "gamma_abc1_x", "gamma_abc1_y",
    ])
    assert params["alpha_x"] == str(vk.alpha[0])
    assert params["gamma_x"] == [str(vk.gamma[0][0]), str(vk.gamma[0][1])]
    assert params["gamma_abc0_y"] == str(vk.gamma_abc[0][1])


class TestVerifyRoute:

    @pytest.mark.parametrize("public_input, expected", [(PUBLIC_INPUT, True), (PUBLIC_INPUT + 1, False)])
    def test_verify(self, client, proof, public_input, expected):
        response = client.post("/verify", json={
            "proof": proof_to_base64(proof), "public_input": str(public_input),
        })
        assert response.status_code == 200
        assert response.get_json() == {"is_valid": expected}

    def test_json_proof(self, client, proof):
        response = client.post("/verify", json={
            "proof": serialize_proof(proof), "public_input": PUBLIC_INPUT,
        })
        assert response.get_json() == {"is_valid": True}

    def test_json_proof_missing_point(self, client, proof):
        data = serialize_proof(proof)
        del data["c"]
        response = client.post("/verify", json={"proof": data, "public_input": PUBLIC_INPUT})
        assert response.status_code == 400

    def test_garbage_proof_is_invalid(self, client):
        response = client.post("/verify", json={"proof": "garbage", "public_input": "30"})
        assert response.get_json() == {"is_valid": False}

    def test_bad_public_input(self, client, proof):
        response = client.post("/verify", json={"proof": proof_to_base64(proof), "public_input": "abc"})
        assert response.status_code == 400

    def test_non_json_body(self, client):
        response = client.post("/verify", data="nope")
        assert response.status_code == 400


class TestManagerRoutes:

    def test_initial_state(self, client, app):
        state = client.get("/manager/state").get_json()
        assert state["proof_counter"] == 0
        assert state["status"] == "active"
        assert state["verifier_address"] == app.config["VERIFIER_ADDRESS"]

    def test_batch_validate(self, client, valid_submission, wrong_input_submission):
        proofs = [base64.b64encode(valid_submission).decode(),
                  base64.b64encode(wrong_input_submission).decode(),
                  "not-a-proof"]
        response = client.post("/manager/batch_validate", json={"caller": "0xanyone", "proofs": proofs})
        assert response.status_code == 200
        assert response.get_json() == {"results": [True, False, False], "proof_counter": 1}

        events = client.get("/manager/events", query_string={"name": ev.PROOF_ACCEPTED}).get_json()
        assert len(events) == 1
        assert events[0]["args"]["index"] == 0

    def test_set_verifier_denied(self, client):
        response = client.post("/manager/verifier", json={"caller": "0xoutsider", "verifier": "0xnew"})
        assert response.status_code == 403
        assert client.get("/manager/events").get_json() == []

    def test_set_verifier(self, client):
        response = client.post("/manager/verifier", json={"caller": ADMIN, "verifier": "0xnew"})
        assert response.status_code == 200
        assert response.get_json()["verifier_address"] == "0xnew"

    def test_role_routes(self, client):
        response = client.post("/manager/authorities", json={"caller": ADMIN, "accounts": ["0xa1", "0xa2"]})
        assert response.get_json() == {"authorities": ["0xa1", "0xa2"]}
        response = client.delete("/manager/authorities", json={"caller": "0xa1", "accounts": ["0xa2"]})
        assert response.get_json() == {"authorities": ["0xa1"]}

        response = client.post("/manager/maintainers", json={"caller": "0xa1", "accounts": ["0xm"]})
        assert response.status_code == 403
        response = client.post("/manager/maintainers", json={"caller": ADMIN, "accounts": ["0xm"]})
        assert response.get_json() == {"maintainers": ["0xm"]}

    def test_empty_identity_rejected(self, client):
        response = client.post("/manager/authorities", json={"caller": ADMIN, "accounts": [""]})
        assert response.status_code == 400

    def test_upgrade(self, client, manager):
        manager.registry.register("0xnext", StubTarget())
        response = client.post("/manager/upgrade", json={"caller": ADMIN, "target": "0xnext"})
        assert response.status_code == 200
        assert response.get_json()["status"] == "upgraded"

        response = client.post("/manager/batch_validate", json={"caller": ADMIN, "proofs": []})
        assert response.status_code == 409

    def test_upgrade_failure_is_reported(self, client):
        response = client.post("/manager/upgrade", json={"caller": ADMIN, "target": "0xnowhere"})
        assert response.status_code == 400
        assert response.get_json()["kind"] == "ConfirmStateFailed"
        assert client.get("/manager/state").get_json()["status"] == "active"


class TestVerifyingKeyFile:

    def test_base64_file(self, vk, tmp_path):
        path = tmp_path / "vk.json"
        save_vk(vk, str(path))
        assert read_vk(str(path)) == vk

    def test_decimal_json_file(self, vk, tmp_path):
        path = tmp_path / "vk.json"
        path.write_text(json.dumps(serialize_vk(vk)))
        assert read_vk(str(path)) == vk

    def test_app_loads_vk_path(self, vk, proof, tmp_path):
        path = tmp_path / "vk.json"
        save_vk(vk, str(path))
        app = create_app(config={"VK_PATH": str(path), "ADMINS": ADMIN})
        response = app.test_client().post("/verify", json={
            "proof": proof_to_base64(proof), "public_input": PUBLIC_INPUT,
        })
        assert response.get_json() == {"is_valid": True}
