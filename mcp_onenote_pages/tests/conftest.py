"""
OneNote 페이지 파이프라인 테스트 공통 Fixtures

- transport: 요청 기록 + 준비된 응답 반환 (FakeTransport)
- client: FakeTransport 를 쓰는 GraphOneNoteClient
- policy: 실제 대기 없는 sleep + 고정 시드 RNG
"""

import random
import pytest

from mcp_onenote_pages.graph_onenote_client import GraphOneNoteClient
from mcp_onenote_pages.onenote_config import OneNoteConfig
from mcp_onenote_pages.onenote_transfer import PollPolicy

from .fakes import FakeTransport, NoSleep


@pytest.fixture
def config():
    """환경 변수와 무관한 기본 설정"""
    return OneNoteConfig()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(transport, config):
    return GraphOneNoteClient(transport=transport, config=config)


@pytest.fixture
def no_sleep():
    return NoSleep()


@pytest.fixture
def policy(no_sleep):
    """실제 대기 없는 기본 폴링 정책 (30회)"""
    return PollPolicy(sleep=no_sleep, rng=random.Random(1234))
