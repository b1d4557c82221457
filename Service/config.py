"""
Service/config.py

그래프 엔진 서비스의 기본 동작을 제어하는 설정 모듈입니다.
"""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GraphConfig(BaseSettings):
    """
    서비스 계층에서 사용하는 기본값을 정의하는 설정 클래스입니다.
    빌더는 반올림 자릿수를 직접 인자로 받으며, 이 값은 서비스가 명시적으로 전달합니다.
    """

    default_precision: int = Field(
        default=3,
        ge=0,
        le=12,
        description="노드 병합 시 좌표 반올림 소수 자릿수"
    )

    bidirectional: bool = Field(
        default=True,
        description="선형마다 역방향 간선을 함께 생성할지 여부(양방향 도로)"
    )

    simplify_in_pipeline: bool = Field(
        default=True,
        description="파이프라인 실행 시 통과 노드 병합(단순화) 수행 여부"
    )

    default_algorithm: Literal["dijkstra", "astar"] = Field(
        default="astar",
        description="최단 경로 탐색 기본 알고리즘"
    )

    track_visited_edges: bool = Field(
        default=False,
        description="최단 경로 탐색 시 검사한 간선 목록 포함 여부"
    )

    export_graph_store: bool = Field(
        default=True,
        description="파이프라인 결과 그래프를 JSON으로 함께 저장할지 여부"
    )

    debug_export_intermediate: bool = Field(
        default=False,
        description="디버그 모드: 단순화 전 그래프 간선을 Result 폴더에 저장 여부"
    )

    model_config = SettingsConfigDict(
        env_prefix="GRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
