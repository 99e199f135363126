"""Sample rental-property data for trying out a fresh Chroma server.

Properties, units and tenants are rendered into searchable text documents
with flat scalar metadata and loaded through the collection gateway.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel

from chroma_admin.exceptions import AlreadyExistsError
from chroma_admin.logging_config import get_logger
from chroma_admin.vectorstore.gateway import CollectionGateway
from chroma_admin.vectorstore.models import CollectionConfig, Document

logger = get_logger(__name__)

SAMPLE_QUERIES = [
    "who is the tenant of unit 001",
    "villa with garden in Bangalore",
]


class Property(BaseModel):
    id: str
    name: str
    type: str
    address: str
    city: str
    state: str
    country: str
    zip_code: str
    description: str


class Unit(BaseModel):
    unit_id: str
    name: str
    bedroom: int
    baths: int
    kitchen: int
    property_name: str
    rent: int
    deposit_amount: int
    start_date: date
    end_date: date
    notes: str
    property_id: str
    tenant_id: str


def property_document(prop: Property, user_id: str) -> Document:
    """Render a property as a searchable document."""
    text = (
        f"{prop.name} is a {prop.type.lower()} property located at "
        f"{prop.address}, {prop.city}, {prop.state}, {prop.country}, "
        f"zip code {prop.zip_code}. Description: {prop.description}"
    )
    return Document(
        id=prop.id,
        document=text,
        metadata={
            "user_id": user_id,
            "service": "property",
            "type": prop.type,
            "country": prop.country,
            "state": prop.state,
            "city": prop.city,
            "zip_code": prop.zip_code,
            "name": prop.name,
            "searchable": True,
        },
    )


def unit_document(unit: Unit, user_id: str) -> Document:
    """Render a rental unit as a searchable document."""
    text = (
        f"{unit.name} is a {unit.bedroom}-bedroom, {unit.baths}-bathroom unit "
        f"with {unit.kitchen} kitchen(s) in {unit.property_name}. "
        f"The rent is ₹{unit.rent} with a deposit of ₹{unit.deposit_amount}. "
        f"Lease from {unit.start_date:%a %b %d %Y} to {unit.end_date:%a %b %d %Y}. "
        f"Notes: {unit.notes}"
    )
    return Document(
        id=unit.unit_id,
        document=text,
        metadata={
            "user_id": user_id,
            "service": "unit",
            "property_id": unit.property_id,
            "tenant_id": unit.tenant_id,
            "searchable": True,
        },
    )


def sample_documents(user_id: str) -> list[Document]:
    """Build the full sample document set for one user."""
    properties = [
        Property(
            id="prop_001",
            name="Skyview Apartments",
            type="Apartment",
            address="123 Palm Street",
            city="Noida",
            state="Uttar Pradesh",
            country="India",
            zip_code="201301",
            description=(
                "Modern high-rise apartment complex with amenities like gym, "
                "pool, and rooftop garden."
            ),
        ),
        Property(
            id="prop_002",
            name="Green Meadows Villa",
            type="Villa",
            address="45 Banyan Avenue",
            city="Bangalore",
            state="Karnataka",
            country="India",
            zip_code="560103",
            description="Luxury villa in gated community with private lawn and parking.",
        ),
    ]
    units = [
        Unit(
            unit_id="unit_001",
            name="Unit A101",
            bedroom=2,
            baths=2,
            kitchen=1,
            property_name="Skyview Apartments",
            rent=28000,
            deposit_amount=56000,
            start_date=date(2025, 4, 1),
            end_date=date(2026, 3, 31),
            notes="Ideal for families or couples.",
            property_id="prop_001",
            tenant_id="tenant_001",
        ),
        Unit(
            unit_id="unit_002",
            name="Villa B2",
            bedroom=3,
            baths=3,
            kitchen=1,
            property_name="Green Meadows Villa",
            rent=65000,
            deposit_amount=130000,
            start_date=date(2025, 5, 15),
            end_date=date(2027, 5, 14),
            notes="Comes with private garden and parking.",
            property_id="prop_002",
            tenant_id="tenant_002",
        ),
    ]
    tenant = Document(
        id="tenant_003",
        document=(
            "Unit 101 assigned to Name: New Tenant. Email: newtenant@example.com, "
            "Phone: +91-9876543210, Address: 123 New Street, Noida, Uttar Pradesh, "
            "India - 201301. Notes: New tenant with valid ID proof."
        ),
        metadata={
            "user_id": user_id,
            "service": "tenant",
            "unit_id": "unit_001",
            "name": "New Tenant",
            "city": "Noida",
            "searchable": True,
        },
    )

    return (
        [property_document(p, user_id) for p in properties]
        + [unit_document(u, user_id) for u in units]
        + [tenant]
    )


async def seed_demo_data(
    gateway: CollectionGateway,
    collection: str,
    user_id: str,
) -> dict[str, Any]:
    """Create the collection if needed and load the sample documents.

    Returns:
        Summary with the collection name, whether it was created, and the
        number of documents added. Sample ids already present in an existing
        collection are left as they are and not counted.
    """
    created = True
    try:
        await gateway.create_collection(
            CollectionConfig(
                name=collection,
                metadata={"description": "Sample rental property data"},
            )
        )
    except AlreadyExistsError:
        created = False
        logger.info(f'Collection "{collection}" exists; adding sample documents to it')

    docs = sample_documents(user_id)
    if not created:
        present = {doc.id for doc in await gateway.list_documents(collection)}
        docs = [doc for doc in docs if doc.id not in present]

    added = await gateway.add_documents(collection, docs) if docs else 0
    return {"collection": collection, "created": created, "documents_added": added}
