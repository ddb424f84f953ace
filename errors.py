"""분석 파이프라인 예외 정의."""


class AnalysisError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ConfigurationError(AnalysisError):
    default_message = "Missing ANTHROPIC_API_KEY in environment"


class InvalidInput(AnalysisError):
    status_code = 400
    default_message = "Missing screenshot upload (imageDataUrl)"


class PayloadTooLarge(AnalysisError):
    status_code = 413
    default_message = (
        "Screenshot is too large. Upload a smaller image (or compress it) and try again."
    )


class EmptyModelResponse(AnalysisError):
    default_message = "Model returned empty response"


class MalformedModelResponse(AnalysisError):
    default_message = "Model did not return valid JSON"

    def __init__(self, raw: str, message=None):
        super().__init__(message)
        self.raw = raw

    def to_dict(self) -> dict:
        return {"error": self.message, "raw": self.raw}


class UnexpectedError(AnalysisError):
    pass


# ── Client side ──
class ImageError(Exception):
    """업로드 이미지 처리 실패."""


class UnsupportedImage(ImageError):
    pass


class FileReadError(ImageError):
    pass


class RenderError(ImageError):
    pass


class SubmissionError(Exception):
    pass


class SubmissionInProgress(SubmissionError):
    pass
