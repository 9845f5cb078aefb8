"""API 예외 정의

Provider Adapter 는 아래 예외를 던지고, 라우터가 경계에서 모두 잡아
``{"error": message}`` 응답으로 변환한다. ``status_code`` 는 라우터가
그대로 HTTP 상태 코드로 사용한다.
"""

from typing import Any, Dict, Optional


class MakeoverError(Exception):
    """모든 API 오류의 기본 클래스"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# --- 클라이언트 오용 (Provider 호출 전에 실패) ---

class MethodNotAllowed(MakeoverError):
    """POST 이외의 메서드"""

    status_code = 405

    def __init__(self, method: str = ""):
        self.method = method
        super().__init__("Method not allowed", {"method": method} if method else None)


class InvalidAction(MakeoverError):
    """알 수 없는 action"""

    status_code = 400

    def __init__(self, action: Any = None):
        self.action = action
        super().__init__("Invalid action", {"action": action})


# --- Provider 응답이 사용할 수 없는 경우 ---

class ProviderBlocked(MakeoverError):
    """후보(candidate)가 하나도 없는 응답 (안전 필터 등)"""

    def __init__(self, message: str, block_reason: Optional[str] = None):
        self.block_reason = block_reason
        super().__init__(message, {"block_reason": block_reason} if block_reason else None)


class GenerationStopped(MakeoverError):
    """STOP 이외의 finish reason"""

    def __init__(self, finish_reason: str):
        self.finish_reason = finish_reason
        super().__init__(
            f"Image generation stopped unexpectedly. Reason: {finish_reason}",
            {"finish_reason": finish_reason}
        )


class UnexpectedTextResponse(MakeoverError):
    """이미지 대신 텍스트만 돌아온 경우"""

    preview_length = 100

    def __init__(self, text: str):
        self.preview = text[:self.preview_length]
        super().__init__(
            "The AI provided a text response instead of an image. "
            "This can happen if the request is not possible to fulfill. "
            f'AI response: "{self.preview}..."'
        )


class NoImageReturned(MakeoverError):
    """정상 응답이지만 이미지 데이터가 없음"""

    def __init__(self):
        super().__init__(
            "The AI did not return a redesigned image. "
            "The response was valid but contained no image data."
        )


class MalformedResponse(MakeoverError):
    """JSON 파싱 실패"""

    def __init__(self, reason: str, raw_text: Optional[str] = None):
        super().__init__(
            f"AI response could not be parsed as JSON: {reason}",
            {"raw_text": raw_text[:200]} if raw_text else None
        )


class ValidationError(MakeoverError):
    """파싱은 됐지만 필수 필드가 없거나 형식이 맞지 않음"""

    def __init__(self, message: str, missing_fields: Optional[list] = None):
        self.missing_fields = missing_fields or []
        super().__init__(message, {"missing_fields": self.missing_fields} if missing_fields else None)


class ProviderError(MakeoverError):
    """Gemini 호출 자체의 실패 (인증, 네트워크, 쿼터 등)"""

    def __init__(self, message: str, model: Optional[str] = None):
        self.model = model
        super().__init__(message, {"model": model} if model else None)
