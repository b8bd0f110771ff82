from typing import Any

from fastapi import APIRouter, Depends

from src.api.deps import get_current_user, get_rules, get_storage
from src.api.routes.records import unwrap_list
from src.components.records import RankInput, run_top_employees, run_top_products
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


def _rank_input(user: User, limit: int | None, rules: Rules) -> RankInput:
    return RankInput(
        actor_id=user.id,
        limit=rules.rankings.default_limit if limit is None else limit,
        max_limit=rules.rankings.max_limit,
    )


@router.get("/top-employees")
def top_employees(
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    storage: Any = Depends(get_storage),
    rules: Rules = Depends(get_rules),
) -> list[dict[str, Any]]:
    """Caller's employees by performance, best first."""
    return unwrap_list(run_top_employees(_rank_input(current_user, limit, rules), storage))


@router.get("/top-products")
def top_products(
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    storage: Any = Depends(get_storage),
    rules: Rules = Depends(get_rules),
) -> list[dict[str, Any]]:
    """Caller's products by sales, best first."""
    return unwrap_list(run_top_products(_rank_input(current_user, limit, rules), storage))
