"""
Common/log.py

날짜별 로그 파일과 콘솔에 동시에 기록하는 애플리케이션 공용 로거 모듈입니다.
"""
import datetime
import logging
import os
import shutil
import sys

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Log:
    def __init__(self, log_dir="Log", name="road_graph"):
        # 프로그램 실행 폴더
        if getattr(sys, 'frozen', False):
            program_dir = os.path.dirname(os.path.abspath(sys.executable))
        else:
            program_dir = os.path.dirname(os.path.abspath(sys.argv[0] or __file__))

        self.log_dir = os.path.join(program_dir, log_dir)
        os.makedirs(self.log_dir, exist_ok=True)

        # 'Log_YYYYMMDD.log'
        self.log_file = os.path.join(self.log_dir, f'Log_{self._current_date_str()}.log')
        # 'YYYYMMDD_작업로그.log'
        self.target_path = os.path.join(program_dir, f'{self._current_date_str()}_작업로그.log')

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._attach_file_handler()

    def _attach_file_handler(self):
        """같은 파일을 가리키는 핸들러가 이미 있으면 새로 붙이지 않습니다."""
        target = os.path.abspath(self.log_file)
        for handler in self._logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                return

        handler = logging.FileHandler(self.log_file, encoding='utf-8')
        handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s', datefmt='%Y/%m/%d %H:%M'))
        self._logger.addHandler(handler)

    def _current_date_str(self):
        return datetime.datetime.now().strftime("%Y%m%d")

    def log(self, msg, level='DEBUG', create_log=False):
        """지정된 로그 레벨로 메시지를 기록하고, 필요시 로그 파일을 복사합니다."""
        level = level.upper()
        numeric_level = _LEVELS.get(level)
        if numeric_level is None:
            print(f"알 수 없는 로그 레벨: {level}")
            return

        self._logger.log(numeric_level, msg)
        print(f"{level}: {msg}")

        if create_log:
            self._copy_log()

    def _copy_log(self):
        """로그 파일을 작업로그 경로로 복사합니다."""
        try:
            shutil.copy(self.log_file, self.target_path)
        except Exception as e:
            print(f"로그 파일 복사 실패: {e}")

    def get_log_paths(self):
        return self.log_file
