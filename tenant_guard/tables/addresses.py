# tenant_guard/tables/addresses.py

NAME = "Property Addresses"
DESCRIPTION = "Property records keyed by address: parcel data, owners, geo coordinates and permit history rollups."

# 1. DDL (ClickHouse)
DDL = """
CREATE TABLE addresses (
    org_id String,                     -- Owning tenant, injected by the guard
    id String,
    created_at DateTime,
    updated_at DateTime,
    name String,
    type String,
    metadata String,
    attom_id Nullable(String),
    record_last_updated Nullable(DateTime),
    address_type_description Nullable(String),
    apn_formatted Nullable(String),
    built_year_at Nullable(UInt32),
    city Nullable(String),
    contractor_names Nullable(String),
    county_name Nullable(String),
    full_address String,
    full_address_has_numbers UInt8,
    homeowner_names Nullable(String),
    job_count UInt32,
    latest_permit_date Nullable(Date),
    latest_permit_type Nullable(String),
    property_latitude Nullable(Float64),
    property_longitude Nullable(Float64),
    property_legal_description Nullable(String),
    property_type_major_category Nullable(String),
    property_type_sub_category Nullable(String),
    state Nullable(String),
    total_job_value Float64,
    zip Nullable(String),
    street Nullable(String),
    zip_code Nullable(String),
    country Nullable(String),
    county Nullable(String),
    latitude Nullable(Float64),
    longitude Nullable(Float64),
    address_type Nullable(String),
    property_value Nullable(Float64),
    lot_size Nullable(Float64),
    building_area Nullable(Float64),
    year_built Nullable(UInt32),
    zoning Nullable(String),
    project_count UInt32,
    last_permit_date Nullable(Date)
)
"""
