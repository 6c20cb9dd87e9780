import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from zocpos.config import Settings
from zocpos.db import get_db
from zocpos.deps import get_settings, menu_item_list_filter, parse_id
from zocpos.errors import NotFoundError
from zocpos.models.common import utcnow
from zocpos.models.core import MenuItem, SUGGESTED_CATEGORIES
from zocpos.schemas.common import Msg, Page
from zocpos.schemas.menu import MenuItemIn, MenuItemListFilter, MenuItemOut, MenuItemUpdate
from zocpos.services.billing import _cents
from zocpos.services.listing import clamp_page, paginate, search_clause

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu-items", tags=["menu"])


def _get_or_404(db: Session, item_id: str) -> MenuItem:
    it = db.get(MenuItem, parse_id(item_id, "menu item"))
    if not it:
        raise NotFoundError("Menu item not found")
    return it


@router.get("", response_model=Page[MenuItemOut])
def list_items(
    f: MenuItemListFilter = Depends(menu_item_list_filter),
    page: int = 1,
    page_size: Optional[int] = Query(None, alias="pageSize"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Menu items for the POS grid and the back-office table, newest first.
    `search` matches name, description or category.
    """
    q = db.query(MenuItem)
    if f.category:
        q = q.filter(MenuItem.category == f.category)
    if f.available is not None:
        q = q.filter(MenuItem.available.is_(f.available))
    if f.search:
        q = q.filter(search_clause(f.search, MenuItem.name, MenuItem.description, MenuItem.category))
    q = q.order_by(MenuItem.created_at.desc(), MenuItem.name)

    page, page_size = clamp_page(page, page_size, settings)
    rows, total, page_count = paginate(q, page, page_size)
    return Page[MenuItemOut](
        items=[MenuItemOut.model_validate(m) for m in rows],
        total=total, page=page, page_size=page_size, page_count=page_count,
    )


@router.post("", response_model=MenuItemOut, status_code=201)
def create_item(body: MenuItemIn, db: Session = Depends(get_db)):
    payload = body.model_dump()
    payload["price"] = _cents(body.price)
    it = MenuItem(**payload)
    db.add(it)
    db.commit()
    logger.info("menu item %s added to %s", it.name, it.category)
    return it


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    """Suggested categories first, then any others already in use."""
    in_use = sorted(c for (c,) in db.query(MenuItem.category).distinct() if c)
    return SUGGESTED_CATEGORIES + [c for c in in_use if c not in SUGGESTED_CATEGORIES]


@router.get("/{item_id}", response_model=MenuItemOut)
def get_item(item_id: str, db: Session = Depends(get_db)):
    return _get_or_404(db, item_id)


@router.patch("/{item_id}", response_model=MenuItemOut)
def update_item(item_id: str, body: MenuItemUpdate, db: Session = Depends(get_db)):
    it = _get_or_404(db, item_id)
    for k, v in body.model_dump(exclude_unset=True).items():
        if v is None and k != "description":
            continue
        setattr(it, k, _cents(v) if k == "price" else v)
    it.updated_at = utcnow()
    db.commit()
    return it


@router.delete("/{item_id}", response_model=Msg)
def delete_item(item_id: str, db: Session = Depends(get_db)):
    it = _get_or_404(db, item_id)
    db.delete(it)
    db.commit()
    logger.info("menu item %s deleted", item_id)
    return Msg(message="Menu item deleted successfully")
