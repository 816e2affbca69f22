from typing import Any, List, Optional

def envelope(data: Any = None, message: Optional[str] = None, success: bool = True, errors: Optional[List[str]] = None) -> dict:
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    return body
