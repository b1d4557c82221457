"""
main.py

애플리케이션의 진입점이며 객체 생성 및 의존성 주입(Composition Root)을 담당합니다.
입력 선형 레이어 경로를 받아 그래프 파이프라인을 실행합니다.
"""
from __future__ import annotations

import argparse
import sys
import traceback
from typing import List, NoReturn, Optional

from Common.log import Log
from Function.log_cleanup import clean_old_logs
from Service.container import build_app


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="선형 레이어로부터 도로 그래프를 구축하고 결과를 저장합니다.")
    parser.add_argument("input", help="입력 선형 레이어 경로 (.shp/.gpkg/.geojson)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    args = _parse_args(argv)
    logger = Log()

    try:
        logger.log("=== 애플리케이션 초기화 시작 ===", level="INFO")

        clean_old_logs(logger.log_dir, logger)

        built = build_app(logger)
        output = built.graph_service.run_pipeline(args.input)

        logger.log(
            f"=== 파이프라인 정상 종료: 노드 {output.node_count}개, 간선 {output.edge_count}개 -> {output.edges_path} ===",
            level="INFO",
            create_log=True,
        )
        sys.exit(0)

    except Exception:
        error_msg = traceback.format_exc()
        logger.log(f"실행 중 치명적 오류 발생:\n{error_msg}", level="ERROR", create_log=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
