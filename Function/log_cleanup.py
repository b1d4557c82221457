"""
Function/log_cleanup.py

보관 기간이 지난 날짜별 로그 파일(Log_YYYYMMDD.log)을 시작 시점에 정리하는 모듈입니다.
"""
import datetime
from pathlib import Path

RETENTION_DAYS = 3


def _log_file_date(path: Path):
    """파일명에서 날짜를 추출합니다. 형식이 맞지 않으면 None입니다."""
    date_part = path.name[4:12]
    if not date_part.isdigit():
        return None
    return datetime.datetime.strptime(date_part, "%Y%m%d")


def clean_old_logs(log_dir, logger, retention_days=RETENTION_DAYS):
    """
    지정된 디렉토리 내에서 보관 기간이 만료된 로그 파일을 찾아 삭제합니다.

    Args:
        log_dir (str | Path): 로그 파일이 저장된 디렉토리 경로
        logger (Log): 로그 기록을 위한 로거 인스턴스
        retention_days (int): 보관 일수

    Returns:
        int: 삭제한 파일 수
    """
    removed = 0
    try:
        directory = Path(log_dir)
        if not directory.exists():
            logger.log(f"로그 디렉토리 없음: {directory} (삭제 과정 생략)", level="WARNING")
            return removed

        now = datetime.datetime.now()

        for path in directory.iterdir():
            if not (path.is_file() and path.name.startswith("Log_")):
                continue

            try:
                file_date = _log_file_date(path)
            except ValueError:
                logger.log(f"잘못된 로그 파일 형식 (삭제 스킵): {path.name}", level="WARNING")
                continue

            if file_date is not None and (now - file_date).days > retention_days:
                path.unlink()
                removed += 1
                logger.log(f"오래된 로그 파일 삭제: {path.name}", level="INFO")

    except OSError as e:
        logger.log(f"로그 파일 정리 중 오류 발생: {e} (기능 패스)", level="ERROR")

    return removed
