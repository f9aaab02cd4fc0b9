# tenant_guard/tables/projects.py

NAME = "Permit Projects"
DESCRIPTION = "One row per permitted construction project, with lifecycle dates, fees and contractor details."

# 1. DDL (ClickHouse)
DDL = """
CREATE TABLE projects (
    org_id String,                     -- Owning tenant, injected by the guard
    id String,
    created_at DateTime,
    updated_at DateTime,
    name String,
    type String,
    metadata String,                   -- JSON blob
    permit_number String,
    description Nullable(String),
    project_type String,
    status String,                     -- e.g. 'active', 'completed', 'expired'
    value Float64,
    square_footage Nullable(Float64),
    contractor_id Nullable(String),
    contractor_name Nullable(String),
    owner_name Nullable(String),
    address_id Nullable(String),
    address_full Nullable(String),
    city Nullable(String),
    state Nullable(String),
    zip_code Nullable(String),
    submitted_date Nullable(Date),
    issued_date Nullable(Date),
    completed_date Nullable(Date),
    expiration_date Nullable(Date),
    inspection_count UInt32,
    last_inspection_date Nullable(Date),
    fees_total Float64,
    fees_paid Float64,
    company_name Nullable(String),
    start_date Nullable(Date),
    end_date Nullable(Date),
    budget Nullable(Float64),
    spent Nullable(Float64),
    progress Nullable(Float64),
    milestone_count UInt32
)
"""
