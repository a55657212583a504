from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from venuebook.core.deps import get_db, require_admin
from venuebook.core.logging_config import get_logger
from venuebook.models.package import Package
from venuebook.schemas.package import PackageCreate, PackageOut, PackageUpdate
from venuebook.services.audit_service import write_booking_action

router = APIRouter()
admin_logger = get_logger("admin")


def _name_taken(db: Session, name: str, *, exclude_id: str | None = None) -> bool:
    q = select(Package.id).where(Package.name == name)
    if exclude_id:
        q = q.where(Package.id != exclude_id)
    return db.execute(q).first() is not None


@router.get("", response_model=list[PackageOut])
def list_packages(db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    return db.execute(select(Package).order_by(Package.order_index, Package.name)).scalars().all()


@router.post("", response_model=PackageOut, status_code=201)
def create_package(payload: PackageCreate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    if _name_taken(db, payload.name):
        raise HTTPException(status_code=409, detail="A package with this name already exists")

    p = Package(**payload.model_dump())
    db.add(p)
    db.flush()

    write_booking_action(db, action="package_created", actor=actor, details={"package_id": p.id, "name": p.name, "price": p.price}, request=request, commit=False)
    db.commit()
    db.refresh(p)

    admin_logger.info(f"Package created | id={p.id} | name={p.name} | by={actor}")
    return p


@router.patch("/{package_id}", response_model=PackageOut)
def update_package(package_id: str, payload: PackageUpdate, request: Request, db: Session = Depends(get_db), actor: str = Depends(require_admin)):
    p = db.get(Package, package_id)
    if not p:
        raise HTTPException(status_code=404, detail="Package not found")

    data = payload.model_dump(exclude_unset=True)
    if data.get("name") and _name_taken(db, data["name"], exclude_id=p.id):
        raise HTTPException(status_code=409, detail="A package with this name already exists")
    for k, val in data.items():
        if val is not None:
            setattr(p, k, val)

    write_booking_action(db, action="package_updated", actor=actor, details={"package_id": p.id, "keys": sorted(data.keys())}, request=request, commit=False)
    db.commit()
    db.refresh(p)
    return p
