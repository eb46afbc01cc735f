import json
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
CART = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Products (newest first) ===")
cur.execute(
    "SELECT id, item_id, name_en, price, old_price, in_stock, created_at FROM products ORDER BY created_at DESC LIMIT 20"
)
for r in cur.fetchall():
    print(r)

print("\n=== Carts ===")
if CART:
    cur.execute(
        "SELECT cart_uuid, payload, updated_at FROM carts WHERE cart_uuid=?", (CART,)
    )
else:
    cur.execute(
        "SELECT cart_uuid, payload, updated_at FROM carts ORDER BY updated_at DESC LIMIT 20"
    )
for cart_uuid, payload, updated_at in cur.fetchall():
    try:
        payload = json.loads(payload) if isinstance(payload, str) else payload
    except ValueError:
        pass
    lines = payload.get("lines", []) if isinstance(payload, dict) else []
    print(
        {
            "cart_uuid": cart_uuid,
            "region": payload.get("region_key") if isinstance(payload, dict) else None,
            "lines": len(lines),
            "items": sum(int(l.get("quantity", 0)) for l in lines),
            "updated_at": updated_at,
        }
    )

conn.close()
