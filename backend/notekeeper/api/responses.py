from __future__ import annotations

from fastapi import Response, status


def no_content() -> Response:
    """Soft 404: an empty success response that does not reveal whether the record exists."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)
