from __future__ import annotations


class DxfSvgError(Exception):
    pass


class FatalInputError(DxfSvgError, ValueError):
    # a numeric group code value beyond the sanity bound; the input is corrupt
    def __init__(self, code: int, value: float) -> None:
        super().__init__(f"group code {code} is invalid ({value})")
        self.code = code
        self.value = value


class DocumentReadError(DxfSvgError):
    pass
