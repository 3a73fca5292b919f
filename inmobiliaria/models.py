# inmobiliaria/models.py
from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


# -----------------------------
# Catalog enums (values are what the admin UI shows)
# -----------------------------
class PropertyType(str, enum.Enum):
    vivienda = "Vivienda"
    oficina = "Oficina"
    local = "Local"
    nave = "Nave"
    garaje = "Garaje"
    terreno = "Terreno"
    trastero = "Trastero"
    edificio = "Edificio"
    obra_nueva = "ObraNueva"


class DwellingType(str, enum.Enum):
    piso = "Piso"
    atico = "Ático"
    duplex = "Dúplex"
    casa = "Casa"
    chalet = "Chalet"
    villa = "Villa"
    masia = "Masía"
    finca = "Finca"
    loft = "Loft"


class Condition(str, enum.Enum):
    obra_nueva = "ObraNueva"
    buen_estado = "BuenEstado"
    a_reformar = "AReformar"


class FloorPosition(str, enum.Enum):
    ultima_planta = "UltimaPlanta"
    planta_intermedia = "PlantaIntermedia"
    bajo = "Bajo"


class ListingType(str, enum.Enum):
    venta = "Venta"
    alquiler = "Alquiler"


class SaleState(str, enum.Enum):
    disponible = "Disponible"
    reservada = "Reservada"
    vendida = "Vendida"
    cerrada = "Cerrada"
    # captación: imported/acquired but not yet reviewed
    pendiente = "Pendiente"


class MessageStatus(str, enum.Enum):
    nuevo = "Nuevo"
    en_curso = "EnCurso"
    cerrado = "Cerrado"


class ImportSource(str, enum.Enum):
    csv = "csv"
    json = "json"


# -----------------------------
# Models
# -----------------------------
class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_property_price_non_negative"),
        CheckConstraint("area_m2 IS NULL OR area_m2 >= 0", name="ck_property_area_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)

    title: Mapped[str] = mapped_column(String(200))
    short_description: Mapped[str | None] = mapped_column(String(300), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    price: Mapped[int] = mapped_column(Integer, index=True)
    rooms: Mapped[int] = mapped_column(Integer, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0)
    garage: Mapped[int] = mapped_column(Integer, default=0)
    area_m2: Mapped[int | None] = mapped_column(Integer, nullable=True)

    province: Mapped[str | None] = mapped_column(String(100), nullable=True)
    locality: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    street: Mapped[str | None] = mapped_column(String(100), nullable=True)
    number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    property_type: Mapped[PropertyType | None] = mapped_column(Enum(PropertyType), nullable=True)
    dwelling_type: Mapped[DwellingType | None] = mapped_column(Enum(DwellingType), nullable=True)
    condition: Mapped[Condition | None] = mapped_column(Enum(Condition), nullable=True)
    floor_position: Mapped[FloorPosition | None] = mapped_column(Enum(FloorPosition), nullable=True)
    listing_type: Mapped[ListingType | None] = mapped_column(Enum(ListingType), nullable=True)
    sale_state: Mapped[SaleState] = mapped_column(Enum(SaleState), default=SaleState.disponible, index=True)

    # JSON array of amenity tags ("Ascensor", "Terraza", ...)
    amenities_json: Mapped[str] = mapped_column(Text, default="[]")

    published: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # --- Captación ---
    acquired_by: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    acquisition_pct: Mapped[float] = mapped_column(Float, default=0.0)
    commission_pct: Mapped[float] = mapped_column(Float, default=0.0)
    acquired_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    owner_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    owner_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # --- Import provenance ---
    source_url: Mapped[str | None] = mapped_column(String(500), nullable=True, index=True)
    advertiser: Mapped[str | None] = mapped_column(String(200), nullable=True)
    scraped_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    import_source: Mapped[ImportSource | None] = mapped_column(Enum(ImportSource), nullable=True, index=True)
    import_batch_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)

    # normalized title/locality; written by PropertyRepository on insert
    title_key: Mapped[str] = mapped_column(String(200), default="", index=True)
    locality_key: Mapped[str] = mapped_column(String(100), default="", index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    images: Mapped[list[PropertyImage]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="PropertyImage.sort_order",
    )
    messages: Mapped[list[Message]] = relationship(back_populates="property")


class PropertyImage(Base):
    __tablename__ = "property_images"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    property_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("properties.id", ondelete="CASCADE"), index=True
    )
    url: Mapped[str] = mapped_column(String(1000))
    # 0/1 is the main image
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    property: Mapped[Property] = relationship(back_populates="images")


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    # weak reference: survives property deletion
    property_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(200), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[MessageStatus] = mapped_column(Enum(MessageStatus), default=MessageStatus.nuevo, index=True)
    pinned: Mapped[bool] = mapped_column(Boolean, default=False)

    received_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    property: Mapped[Property | None] = relationship(back_populates="messages")
