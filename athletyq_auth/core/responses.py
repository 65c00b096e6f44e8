from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


def ok(data: Any = None, status_code: int = 200) -> JSONResponse:
    content: Dict[str, Any] = {"ok": True}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content)


def fail(
    message: str,
    status_code: int,
    code: Optional[str] = None,
    details: Optional[Any] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {"message": message}
    if code is not None:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})
