"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schema definitions shared by every router.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """오류 메시지 응답 스키마.

    Error body returned for every non-2xx response.

    Attributes:
        message: 사용자에게 보이는 메시지 (Client-facing message)
    """

    message: str
