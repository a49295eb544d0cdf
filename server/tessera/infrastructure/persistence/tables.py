"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# IDENTITIES TABLE
# ============================================================================
identities_table = Table(
    "identities",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("email", String(320), nullable=False),  # normalized (lowercase)
    Column("email_verified_at", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("email", name="uq_identities_email"),
)


# ============================================================================
# ACCOUNTS TABLE (tenants)
# ============================================================================
accounts_table = Table(
    "accounts",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("external_id", Integer, nullable=False),  # seven-digit URL path segment
    Column("name", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("external_id", name="uq_accounts_external_id"),
)


# ============================================================================
# USERS TABLE (an identity's membership in an account)
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column("account_id", String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
    Column("identity_id", String, ForeignKey("identities.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("account_id", "identity_id", name="uq_users_account_identity"),
)

Index("ix_users_identity_id", users_table.c.identity_id)


# ============================================================================
# SESSIONS TABLE
# ============================================================================
sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String, primary_key=True),  # UUID as string
    Column(
        "identity_id", String, ForeignKey("identities.id", ondelete="CASCADE"), nullable=False
    ),
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), nullable=True),
    Column("user_agent", String(512), nullable=True),
    Column("ip_address", String(45), nullable=True),  # fits IPv6
    Column("created_at", DateTime(timezone=True), nullable=False),
)

Index("ix_sessions_identity_id", sessions_table.c.identity_id)
