import os
import sqlite3

db_path = os.path.join('instance', 'land_rental.db')
if not os.path.exists(db_path):
    print(f"Database not found at {db_path}")
else:
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
    tables = cursor.fetchall()
    print("Tables in database:")
    for table in tables:
        cursor.execute(f'SELECT COUNT(*) FROM "{table[0]}"')
        print(f" - {table[0]} ({cursor.fetchone()[0]} rows)")
    conn.close()
