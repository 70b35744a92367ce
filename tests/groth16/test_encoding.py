import base64
import json

import pytest

from zkmanager.errors import CurveOperationFailed, InvalidProof
from zkmanager.groth16 import encoding
from zkmanager.groth16.curve import CURVE_ORDER
from zkmanager.groth16.encoding import (
    PROOF_SIZE, SUBMISSION_SIZE, VK_SIZE,
    proof_to_bytes, proof_from_bytes, encode_submission, decode_submission,
    vk_to_bytes, vk_from_base64, vk_to_base64, vk_params,
    verify_proof_string, proof_to_base64,
)

from conftest import PUBLIC_INPUT


class TestProofBlob:

    def test_size(self, proof):
        assert len(proof_to_bytes(proof)) == PROOF_SIZE == 256

    def test_layout_big_endian_words(self, proof):
        raw = proof_to_bytes(proof)
        assert int.from_bytes(raw[:32], "big") == proof.a[0]
        assert int.from_bytes(raw[64:96], "big") == proof.b[0][0]
        assert int.from_bytes(raw[96:128], "big") == proof.b[0][1]
        assert int.from_bytes(raw[224:], "big") == proof.c[1]

    def test_decode(self, proof):
        assert proof_from_bytes(proof_to_bytes(proof)) == proof

    def test_wrong_length(self, proof):
        with pytest.raises(InvalidProof):
            proof_from_bytes(proof_to_bytes(proof)[:-1])

    def test_off_curve_point(self, proof):
        raw = bytearray(proof_to_bytes(proof))
        raw[31] ^= 1
        with pytest.raises(InvalidProof):
            proof_from_bytes(bytes(raw))


class TestSubmission:

    def test_size_and_input(self, valid_submission, proof):
        assert len(valid_submission) == SUBMISSION_SIZE == 288
        decoded, public_input = decode_submission(valid_submission)
        assert decoded == proof
        assert public_input == PUBLIC_INPUT

    def test_input_outside_scalar_field(self, proof):
        raw = proof_to_bytes(proof) + CURVE_ORDER.to_bytes(32, "big")
        with pytest.raises(InvalidProof):
            decode_submission(raw)

    def test_empty(self):
        with pytest.raises(InvalidProof):
            decode_submission(b"")


class TestVerifyingKeyEncoding:

    def test_size(self, vk):
        assert len(vk_to_bytes(vk)) == VK_SIZE == 576

    def test_base64(self, vk):
        text = vk_to_base64(vk)
        assert base64.b64decode(text) == vk_to_bytes(vk)
        assert vk_from_base64(text) == vk

    def test_bad_base64(self):
        with pytest.raises(CurveOperationFailed):
            vk_from_base64("not base64!!")

    def test_params(self, vk):
        params = vk_params(vk)
        assert params["alpha_x"] == str(vk.alpha[0])
        assert params["beta_x"] == [str(vk.beta[0][0]), str(vk.beta[0][1])]
        assert params["delta_y"] == [str(vk.delta[1][0]), str(vk.delta[1][1])]
        assert params["gamma_abc1_y"] == str(vk.gamma_abc[1][1])

    def test_save_and_load(self, vk, tmp_path):
        path = tmp_path / "vk.json"
        encoding.save_vk(vk, str(path))
        assert "vk" in json.loads(path.read_text())
        assert encoding.load_vk(str(path)) == vk

    def test_load_rejects_other_json(self, tmp_path):
        path = tmp_path / "vk.json"
        path.write_text(json.dumps({"alpha": [1, 2]}))
        with pytest.raises(CurveOperationFailed):
            encoding.load_vk(str(path))


class TestVerifyProofString:

    def test_valid(self, vk, proof):
        assert verify_proof_string(proof_to_base64(proof), PUBLIC_INPUT, vk) is True

    def test_garbage_is_false(self, vk):
        assert verify_proof_string("%%%", PUBLIC_INPUT, vk) is False
        assert verify_proof_string("", PUBLIC_INPUT, vk) is False
