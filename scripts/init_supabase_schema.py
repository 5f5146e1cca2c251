#!/usr/bin/env python3
"""
Initialize the ServTec Supabase schema with a direct PostgreSQL connection

Creates the tickets table (unique document numbers, state/priority checks),
the equipment catalog and the invoice/delivery-note number tables, then
seeds a few catalog entries.
"""
import os
import sys

import psycopg2
from dotenv import load_dotenv

load_dotenv()

TICKETS_TABLE = os.getenv("TICKETS_TABLE", "service_tickets")
CATALOG_TABLE = os.getenv("CATALOG_TABLE", "equipment")


def connection_params() -> dict:
    """psycopg2.connect() keyword arguments from .env"""
    return {
        "host": os.getenv("SUPABASE_DB_HOST"),
        "port": int(os.getenv("SUPABASE_DB_PORT", "6543")),
        "dbname": os.getenv("SUPABASE_DB_NAME", "postgres"),
        "user": os.getenv("SUPABASE_DB_USER"),
        "password": os.getenv("SUPABASE_DB_PASSWORD"),
    }


def build_ddl() -> str:
    return f"""
    -- Service tickets
    CREATE TABLE IF NOT EXISTS {TICKETS_TABLE} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        document_number TEXT NOT NULL,
        form_number TEXT,
        work_order_number TEXT,
        description TEXT NOT NULL,
        priority TEXT NOT NULL CHECK (priority IN ('low', 'medium', 'high', 'critical')),
        state TEXT NOT NULL DEFAULT 'pending'
            CHECK (state IN ('pending', 'in_progress', 'waiting_parts', 'done')),
        assigned_handler TEXT NOT NULL DEFAULT '',
        client_name TEXT,
        equipment_id TEXT,
        equipment_name TEXT,
        component TEXT,
        origin TEXT NOT NULL DEFAULT 'whatsapp',
        contact_address TEXT,
        annotation TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    -- Concurrent intake relies on this constraint to detect number collisions
    CREATE UNIQUE INDEX IF NOT EXISTS uq_{TICKETS_TABLE}_document_number
        ON {TICKETS_TABLE}(document_number);
    CREATE UNIQUE INDEX IF NOT EXISTS uq_{TICKETS_TABLE}_form_number
        ON {TICKETS_TABLE}(form_number) WHERE form_number IS NOT NULL;
    CREATE UNIQUE INDEX IF NOT EXISTS uq_{TICKETS_TABLE}_work_order_number
        ON {TICKETS_TABLE}(work_order_number) WHERE work_order_number IS NOT NULL;

    CREATE INDEX IF NOT EXISTS idx_{TICKETS_TABLE}_state_updated
        ON {TICKETS_TABLE}(state, updated_at);
    CREATE INDEX IF NOT EXISTS idx_{TICKETS_TABLE}_created_at
        ON {TICKETS_TABLE}(created_at DESC);

    -- Equipment catalog (read-only for the bot)
    CREATE TABLE IF NOT EXISTS {CATALOG_TABLE} (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        brand TEXT NOT NULL DEFAULT '',
        model TEXT NOT NULL DEFAULT '',
        client TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ DEFAULT NOW()
    );

    -- Other numbered documents
    CREATE TABLE IF NOT EXISTS invoices (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        invoice_number TEXT UNIQUE NOT NULL,
        created_at TIMESTAMPTZ DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS delivery_notes (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        delivery_number TEXT UNIQUE NOT NULL,
        created_at TIMESTAMPTZ DEFAULT NOW()
    );
    """


def build_sample_data() -> str:
    return f"""
    INSERT INTO {CATALOG_TABLE} (id, name, brand, model, client)
    VALUES
        ('EQ-001', 'Ultraformer MPT', 'Classys', 'Ultraformer MPT', 'Clinica Norte SRL'),
        ('EQ-002', 'Hydrafacial', 'Hydrafacial', 'Syndeo', 'Centro Estetico Belleza SA'),
        ('EQ-003', 'ND-Elite', 'Fotona', 'ND-Elite', 'Hospital San Roque')
    ON CONFLICT (id) DO NOTHING;
    """


def create_schema(with_samples: bool = True) -> bool:
    params = connection_params()
    print(f"🔗 {params['user']}@{params['host']}:{params['port']}/{params['dbname']}")

    try:
        conn = psycopg2.connect(**params)
    except psycopg2.Error as e:
        print(f"❌ Connection failed: {e}")
        return False

    try:
        # Each block commits on success and rolls back on error
        with conn, conn.cursor() as cur:
            cur.execute(build_ddl())
        print("✅ Tables and indexes ready")

        if with_samples:
            with conn, conn.cursor() as cur:
                cur.execute(build_sample_data())
            print("✅ Catalog seeded")

        with conn.cursor() as cur:
            for table in (TICKETS_TABLE, CATALOG_TABLE, "invoices", "delivery_notes"):
                cur.execute(f"SELECT COUNT(*) FROM {table}")
                print(f"  {table}: {cur.fetchone()[0]} rows")
    except psycopg2.Error as e:
        print(f"❌ Schema setup failed: {e}")
        return False
    finally:
        conn.close()

    return True


if __name__ == "__main__":
    ok = create_schema(with_samples="--no-samples" not in sys.argv)
    sys.exit(0 if ok else 1)
