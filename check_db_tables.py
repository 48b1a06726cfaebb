#!/usr/bin/env python3
import os
import sys
from urllib.parse import urlparse

import psycopg2

REQUIRED_TABLES = ["fasts", "fast_reminder_logs", "device_tokens", "notifications"]
LEDGER_CONSTRAINT = "uq_fast_reminder_logs_slot"

# Get database URL from environment
db_url = os.getenv('SQLALCHEMY_DATABASE_URI')
if not db_url:
    print('❌ SQLALCHEMY_DATABASE_URI not found in environment')
    sys.exit(1)

print(f'🔗 Database URL: {db_url[:50]}...')

# Parse the URL
parsed = urlparse(db_url)
conn = psycopg2.connect(
    host=parsed.hostname,
    port=parsed.port,
    database=parsed.path[1:],
    user=parsed.username,
    password=parsed.password
)

ok = True
try:
    cur = conn.cursor()

    for table in REQUIRED_TABLES:
        cur.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public'
                AND table_name = %s
            );
        """, (table,))
        exists = cur.fetchone()[0]
        ok = ok and exists
        print(f'📋 {table} table exists: {exists}')

    # The ledger's unique constraint is the only thing preventing duplicate reminders
    cur.execute("""
        SELECT string_agg(kcu.column_name, ',' ORDER BY kcu.ordinal_position)
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON tc.constraint_name = kcu.constraint_name
         AND tc.table_schema = kcu.table_schema
        WHERE tc.table_schema = 'public'
        AND tc.table_name = 'fast_reminder_logs'
        AND tc.constraint_type = 'UNIQUE'
        AND tc.constraint_name = %s;
    """, (LEDGER_CONSTRAINT,))
    columns = cur.fetchone()[0]
    ledger_ok = columns == 'fast_id,date_key,time_key'
    ok = ok and ledger_ok
    print(f'📋 {LEDGER_CONSTRAINT} on ({columns or "missing"}): {ledger_ok}')
finally:
    conn.close()

if not ok:
    print('❌ Database check failed - run `alembic upgrade head`')
    sys.exit(1)
print('✅ Database check completed!')
