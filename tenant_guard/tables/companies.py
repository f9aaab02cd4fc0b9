# tenant_guard/tables/companies.py

NAME = "Contractor Companies"
DESCRIPTION = "Companies and contractors that pull permits, with licensing, insurance and rollup project stats."

# 1. DDL (ClickHouse)
DDL = """
CREATE TABLE companies (
    org_id String,                     -- Owning tenant, injected by the guard
    id String,
    created_at DateTime,
    updated_at DateTime,
    name String,
    type String,
    metadata String,
    industry Nullable(String),
    size Nullable(String),
    revenue Nullable(Float64),
    employee_count Nullable(UInt32),
    website Nullable(String),
    location Nullable(String),
    status String,
    project_count UInt32,
    total_project_value Float64,
    last_project_date Nullable(Date),
    contact_email Nullable(String),
    contact_phone Nullable(String),
    notes Nullable(String),
    active_permits UInt32,
    primary_contractor Nullable(String),
    license_number Nullable(String),
    insurance_status Nullable(String),
    bonding_capacity Nullable(Float64),
    safety_rating Nullable(Float64)
)
"""
