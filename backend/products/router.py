"""
Product endpoints: catalog CRUD and the xlsx export.

Invariants enforced by every handler
------------------------------------
* A valid JWT is required on every endpoint.  The token guard is declared
  before ``get_db`` so an unauthenticated request never opens a session.
* Writes (create / update / delete / export) additionally require the
  ``admin`` role.
* Each write is a single commit, and every write stamps ``last_update``
  with the server clock; the list endpoint orders on it.
* PUT is a full replace: the request body is the complete new state of the
  product's mutable fields.
"""

import io

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from sqlalchemy.orm import Session

from database import get_db
from core.envelope import ApiError, NOT_FOUND, Envelope, ok
from core.logger import logger
from core.security import TokenIdentity, get_current_identity, require_admin
from models.product import Product, utcnow
from products.schemas import ProductCreated, ProductResponse, ProductWrite

router = APIRouter(prefix="/products", tags=["products"])


def _get_product(product_id: int, db: Session) -> Product:
    """Load a Product by ID or raise 404."""
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Product not found", code=NOT_FOUND)
    return product


def _apply(product: Product, body: ProductWrite) -> None:
    """Overwrite every mutable column from *body* and refresh the timestamp."""
    product.name = body.name
    product.description = body.description
    product.price = body.price
    product.stock = body.stock
    product.category = body.category
    product.brand = body.brand
    product.location = body.location
    product.sizes = body.sizes
    product.product_code = body.product_code
    product.order_name = body.order_name
    product.image = body.image
    product.status = body.status
    product.store_availability = [s.model_dump() for s in body.store_availability]
    product.last_update = utcnow()


# ---------------------------------------------------------------------------
# GET /products : full catalog, most recently updated first
# ---------------------------------------------------------------------------


@router.get("", response_model=Envelope[list[ProductResponse]])
def list_products(
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Return every product.  No pagination; clients filter locally."""
    products = (
        db.query(Product)
        .order_by(Product.last_update.desc(), Product.id.desc())
        .all()
    )
    return ok([ProductResponse.model_validate(p) for p in products])


# ---------------------------------------------------------------------------
# GET /products/export : download the catalog as an Excel workbook
# ---------------------------------------------------------------------------
# Declared before /{product_id} so "export" is never parsed as an id.

_HEADER_FONT  = Font(name="Calibri", size=11, bold=True, color="FFFFFF")
_HEADER_FILL  = PatternFill(start_color="2563EB", end_color="2563EB", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", vertical="center")
_THIN_BORDER  = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

_EXPORT_HEADERS = [
    "ID", "Name", "Product Code", "Category", "Brand", "Price", "Stock",
    "Status", "Location", "Sizes", "Order Name", "Description", "Last Update",
]
_COL_MIN = [8, 28, 16, 16, 16, 10, 8, 10, 20, 12, 20, 36, 20]


@router.get("/export")
def export_products(
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Stream an .xlsx file with one row per product.  Nothing is written to
    disk on the server.
    """
    products = db.query(Product).order_by(Product.name.asc()).all()

    wb = Workbook()
    ws = wb.active
    ws.title = "Products"

    # -- Header row ----------------------------------------------------------
    ws.append(_EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN
        cell.border = _THIN_BORDER

    # -- Data rows -----------------------------------------------------------
    for p in products:
        ws.append([
            p.id,
            p.name,
            p.product_code or "",
            p.category or "",
            p.brand or "",
            p.price,
            p.stock,
            p.status,
            p.location or "",
            p.sizes or "",
            p.order_name or "",
            p.description or "",
            p.last_update.strftime("%Y-%m-%d %H:%M:%S") if p.last_update else "",
        ])
        row_idx = ws.max_row
        for col_idx in range(1, len(_EXPORT_HEADERS) + 1):
            ws.cell(row=row_idx, column=col_idx).border = _THIN_BORDER

    for col_idx, min_w in enumerate(_COL_MIN, start=1):
        ws.column_dimensions[chr(64 + col_idx)].width = min_w

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    logger.info("User %s exported %d product(s)", identity.username, len(products))
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="products.xlsx"'},
    )


# ---------------------------------------------------------------------------
# GET /products/{id}
# ---------------------------------------------------------------------------


@router.get("/{product_id}", response_model=Envelope[ProductResponse])
def get_product(
    product_id: int,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(ProductResponse.model_validate(_get_product(product_id, db)))


# ---------------------------------------------------------------------------
# POST /products : create
# ---------------------------------------------------------------------------


@router.post("", response_model=Envelope[ProductCreated], status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductWrite,
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Insert a product; ``last_update`` is assigned here, not by the client."""
    product = Product()
    _apply(product, body)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info("User %s created product id=%d name=%s", identity.username, product.id, product.name)
    return ok(ProductCreated(id=product.id), "Product added successfully")


# ---------------------------------------------------------------------------
# PUT /products/{id} : full replace
# ---------------------------------------------------------------------------


@router.put("/{product_id}", response_model=Envelope[ProductResponse])
def update_product(
    product_id: int,
    body: ProductWrite,
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Replace every mutable field.  Fields missing from the body are cleared,
    not preserved: this is not a PATCH.
    """
    product = _get_product(product_id, db)
    _apply(product, body)
    db.commit()
    db.refresh(product)

    logger.info("User %s updated product id=%d", identity.username, product_id)
    return ok(ProductResponse.model_validate(product), "Product updated successfully")


# ---------------------------------------------------------------------------
# DELETE /products/{id}
# ---------------------------------------------------------------------------


@router.delete("/{product_id}", response_model=Envelope[None])
def delete_product(
    product_id: int,
    identity: TokenIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Hard delete.  A second delete of the same id is a 404."""
    product = _get_product(product_id, db)
    db.delete(product)
    db.commit()

    logger.info("User %s deleted product id=%d", identity.username, product_id)
    return ok(message="Product deleted successfully")
