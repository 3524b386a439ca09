"""Response envelope helpers shared by all routers"""

import math
from typing import Any, Optional


def success(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return body


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def paginated(data: Any, page: int, limit: int, total: int) -> dict:
    return success(data, pagination=pagination(page, limit, total))
