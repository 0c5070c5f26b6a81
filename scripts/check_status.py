#!/usr/bin/env python3
"""店舗の営業状況をコマンドラインで確認

使い方:
    python scripts/check_status.py <place_id>
    python scripts/check_status.py "<店名>" <緯度> <経度>
"""

import sys
from pathlib import Path

# プロジェクトルートをパスに追加
sys.path.insert(0, str(Path(__file__).parent.parent))

from open_status.database import SessionLocal, init_db
from open_status.services.places import PlacesError
from open_status.services.status import lookup_status, PlaceNotFound


def main(argv):
    if len(argv) == 1:
        kwargs = {"place_id": argv[0]}
    elif len(argv) == 3:
        kwargs = {"query": argv[0], "lat": float(argv[1]), "lng": float(argv[2])}
    else:
        print(__doc__)
        return 2

    init_db()
    db = SessionLocal()
    try:
        data, cache_hit = lookup_status(db, **kwargs)
    except PlaceNotFound as e:
        print(f"❓ {e}")
        return 1
    except PlacesError as e:
        print(f"❌ {e}")
        return 1
    finally:
        db.close()

    badge = "🟢 OPEN" if data["is_open"] else "🔴 CLOSED"
    print(f"{data['place_name']} — {data['address']}")
    print(f"   {badge} ({data['timezone']}, {data['business_status']}){' [cache]' if cache_hit else ''}")
    if data.get("closes_at"):
        print(f"   closes {data['closes_at']}")
    if data.get("opens_at"):
        print(f"   opens {data['opens_at']}")
    if not data["weekday_text"]:
        print("   hours unknown")
    for line in data["weekday_text"]:
        print(f"   {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
