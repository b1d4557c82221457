"""
Service/schemas.py

파일 입출력 요청의 구조를 정의하고 입력값의 유효성을 검증하는 스키마 모듈입니다.
"""
from pathlib import Path
from pydantic import BaseModel, Field, field_validator

LINE_LAYER_SUFFIXES = (".shp", ".gpkg", ".geojson")


class FileLoadRequest(BaseModel):
    """
    선형 레이어 로드 요청을 위한 데이터 모델입니다.
    """
    file_path: Path = Field(..., description="읽어올 선형 레이어(SHP/GPKG/GeoJSON) 파일 경로")

    @field_validator("file_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        if v.suffix.lower() not in LINE_LAYER_SUFFIXES:
            raise ValueError(f"지원하지 않는 파일 형식입니다. ({', '.join(LINE_LAYER_SUFFIXES)} 필요): {v.suffix}")
        return v

    @field_validator("file_path")
    @classmethod
    def validate_existence(cls, v: Path) -> Path:
        resolved_path = v.resolve()
        if not resolved_path.exists() or not resolved_path.is_file():
            raise ValueError(f"파일을 찾을 수 없습니다: {resolved_path}")
        return resolved_path


class FileSaveRequest(BaseModel):
    """
    선형 레이어 저장 요청을 위한 데이터 모델입니다.
    """
    output_path: Path = Field(..., description="결과를 저장할 파일 경로")

    @field_validator("output_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        if v.suffix.lower() not in LINE_LAYER_SUFFIXES:
            raise ValueError(f"저장 파일 형식은 {', '.join(LINE_LAYER_SUFFIXES)} 중 하나여야 합니다: {v.suffix}")
        return v.resolve()


class GraphStoreLoadRequest(BaseModel):
    """
    저장된 그래프(JSON) 로드 요청입니다.
    """
    file_path: Path = Field(..., description="읽어올 그래프 JSON 파일 경로")

    @field_validator("file_path")
    @classmethod
    def validate_file(cls, v: Path) -> Path:
        if v.suffix.lower() != ".json":
            raise ValueError(f"그래프 파일 형식은 .json이어야 합니다: {v.suffix}")
        resolved_path = v.resolve()
        if not resolved_path.exists() or not resolved_path.is_file():
            raise ValueError(f"파일을 찾을 수 없습니다: {resolved_path}")
        return resolved_path


class GraphStoreSaveRequest(BaseModel):
    """
    그래프(JSON) 저장 요청입니다.
    """
    output_path: Path = Field(..., description="그래프를 저장할 JSON 파일 경로")

    @field_validator("output_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        if v.suffix.lower() != ".json":
            raise ValueError(f"그래프 파일 형식은 .json이어야 합니다: {v.suffix}")
        return v.resolve()
