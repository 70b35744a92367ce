import json

from flask import Flask, jsonify, request

from zkmanager.config import Config, parse_identities, setup_logging
from zkmanager.errors import AccessDenied, AlreadyUpgraded, ZkManagerError
from zkmanager.groth16.encoding import load_vk, verify_proof_string, vk_params, vk_to_base64
from zkmanager.groth16.verifying import verify
from zkmanager.manager import ZkManager
from zkmanager.manager.registry import ContractRegistry
from zkmanager.manager.store import ManagerStore
from zkmanager.manager.validator import Groth16Validator

from groth16_serializers import deserialize_proof, deserialize_vk, serialize_event, serialize_vk


def read_vk(path):
    """VK_PATH 파일: {"vk": base64} 또는 serialize_vk() 형식의 JSON"""
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict) and "alpha" in data:
        return deserialize_vk(data)
    return load_vk(path)


def create_app(config=None, vk=None, registry=None):
    """Flask 앱을 만든다.

    Args:
        config: 설정 덮어쓰기 dict (테스트용)
        vk: VerifyingKey. 없으면 VK_PATH에서 읽는다.
        registry: ContractRegistry (업그레이드 대상 등을 미리 등록할 때)
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    app.config.from_prefixed_env("ZKM")
    if config:
        app.config.update(config)

    logger = setup_logging(app.config["LOG_LEVEL"])

    if vk is None and app.config["VK_PATH"]:
        vk = read_vk(app.config["VK_PATH"])

    registry = registry if registry is not None else ContractRegistry()
    verifier_address = app.config["VERIFIER_ADDRESS"]
    if vk is not None:
        registry.register(verifier_address, Groth16Validator(vk))
    else:
        logger.warning("no verifying key configured; /verify and batch validation are unavailable")

    manager = ZkManager(
        verifier_address,
        admins=parse_identities(app.config["ADMINS"]),
        registry=registry,
        store=ManagerStore(app.config["DB_PATH"]),
    )
    app.extensions["zk_manager"] = manager
    app.extensions["zk_vk"] = vk

    def body():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        return data

    def require_vk():
        if vk is None:
            raise ZkManagerError("verifying key is not configured")
        return vk

    # ─── errors ───

    @app.errorhandler(AccessDenied)
    def access_denied(err):
        return jsonify({"error": str(err)}), 403

    @app.errorhandler(AlreadyUpgraded)
    def already_upgraded(err):
        return jsonify({"error": str(err)}), 409

    @app.errorhandler(ZkManagerError)
    def manager_error(err):
        return jsonify({"error": str(err), "kind": type(err).__name__}), 400

    @app.errorhandler(ValueError)
    def bad_request(err):
        return jsonify({"error": str(err)}), 400

    # ─── verifier ───

    @app.route("/health")
    def health():
        return jsonify("Ok")

    @app.route("/vk")
    def export_vk():
        key = require_vk()
        return jsonify({"vk": vk_to_base64(key), "params": vk_params(key), "points": serialize_vk(key)})

    @app.route("/verify", methods=["POST"])
    def verify_route():
        data = body()
        try:
            public_input = int(str(data["public_input"]))
        except (KeyError, ValueError):
            raise ValueError("public_input must be a decimal integer") from None
        proof = data.get("proof", "")
        if isinstance(proof, dict):
            # serialize_proof() 형식 {a, b, c}
            try:
                proof = deserialize_proof(proof)
            except (KeyError, IndexError, TypeError, ValueError):
                raise ValueError("proof must hold decimal coordinates a, b, c") from None
            is_valid = verify(require_vk(), proof, public_input)
        else:
            is_valid = verify_proof_string(proof, public_input, require_vk())
        return jsonify({"is_valid": is_valid})

    # ─── manager ───

    @app.route("/manager/state")
    def manager_state():
        return jsonify(manager.state())

    @app.route("/manager/events")
    def manager_events():
        name = request.args.get("name")
        return jsonify([serialize_event(e) for e in manager.events(name)])

    @app.route("/manager/batch_validate", methods=["POST"])
    def batch_validate():
        data = body()
        results = manager.batch_validate(data.get("caller", ""), data.get("proofs", []))
        return jsonify({"results": results, "proof_counter": manager.proof_counter})

    @app.route("/manager/verifier", methods=["POST"])
    def set_verifier():
        data = body()
        manager.set_verifier(data.get("caller", ""), data.get("verifier", ""))
        return jsonify(manager.state())

    @app.route("/manager/authorities", methods=["POST", "DELETE"])
    def authorities():
        data = body()
        if request.method == "POST":
            manager.add_authority(data.get("caller", ""), data.get("accounts", []))
        else:
            manager.remove_authority(data.get("caller", ""), data.get("accounts", []))
        return jsonify({"authorities": sorted(manager.access.members("authority"))})

    @app.route("/manager/maintainers", methods=["POST", "DELETE"])
    def maintainers():
        data = body()
        if request.method == "POST":
            manager.add_maintainer(data.get("caller", ""), data.get("accounts", []))
        else:
            manager.remove_maintainer(data.get("caller", ""), data.get("accounts", []))
        return jsonify({"maintainers": sorted(manager.access.members("maintainer"))})

    @app.route("/manager/upgrade", methods=["POST"])
    def upgrade():
        data = body()
        manager.upgrade(data.get("caller", ""), data.get("target", ""))
        return jsonify(manager.state())

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=3030)
