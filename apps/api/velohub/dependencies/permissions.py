from __future__ import annotations

from fastapi import Depends, HTTPException, status

from velohub.dependencies.auth import StoreContext, get_store_context


def require_roles(*allowed: str):
    """Role gate enforced on the API side (employees cannot touch OPEX or undo sales)."""

    def _dep(ctx: StoreContext = Depends(get_store_context)) -> StoreContext:
        if ctx.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden",
            )
        return ctx

    return _dep
