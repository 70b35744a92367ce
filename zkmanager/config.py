"""
설정 기본값과 로깅 초기화

Flask 설정 객체 형식(대문자 속성)을 따른다. app.py에서
app.config.from_object(Config) 후 ZKM_ 접두사 환경 변수로 덮어쓴다.

    ZKM_DB_PATH=manager.json ZKM_ADMINS=0xabc,0xdef flask run
"""

import logging


class Config:
    # None 이면 메모리 TinyDB
    DB_PATH = None
    # {"vk": base64} JSON 파일
    VK_PATH = None
    # 쉼표로 구분된 초기 admin 주소
    ADMINS = ""
    # 내장 Groth16 검증기가 등록될 주소
    VERIFIER_ADDRESS = "0x0000000000000000000000000000000000000001"
    LOG_LEVEL = "INFO"
    SECRET_KEY = "key"


def parse_identities(value):
    """"0xa, 0xb" 또는 리스트 → ["0xa", "0xb"]"""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [v.strip() for v in value if v and v.strip()]


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger("zkmanager")
