# backend/salon/seed_data.py
"""
프로세스 시작 시 RecordStore 에 들어가는 고정 샘플 데이터.
이름(스태프/고객)은 여기 넣지 않고 조회 시점에 Query.join 으로 붙인다.
"""
from __future__ import annotations

import copy
from typing import Dict, List

ADMIN_ID = "mock-admin-id"
STAFF_ID = "mock-staff-id"

SEED_TABLES: Dict[str, List[dict]] = {
    "users": [
        {
            "id": ADMIN_ID,
            "email": "admin@salon.com",
            "name": "管理者",
            "role": "admin",
            "active": True,
            "created_at": "2024-01-01T00:00:00Z",
        },
        {
            "id": STAFF_ID,
            "email": "staff@salon.com",
            "name": "スタッフ",
            "role": "staff",
            "active": True,
            "created_at": "2024-01-01T00:00:00Z",
        },
    ],
    "clients": [
        {
            "id": "client-1",
            "name": "田中 花子",
            "contact": "090-1234-5678",
            "notes": "アレルギー: なし\n希望施術: 痩身・ボディケア\n目標: ウエスト-5cm",
            "primary_staff_id": STAFF_ID,
            "created_at": "2024-01-15T00:00:00Z",
        },
        {
            "id": "client-2",
            "name": "佐藤 美咲",
            "contact": "misaki@example.com",
            "notes": "下半身のむくみが気になる\n希望施術: リンパドレナージュ中心",
            "primary_staff_id": ADMIN_ID,
            "created_at": "2024-01-20T00:00:00Z",
        },
    ],
    "visits": [
        {
            "id": "visit-1",
            "client_id": "client-1",
            "visit_date": "2024-01-25",
            "service_menu": "痩身施術",
            "notes": "体重測定後、キャビテーションとリンパドレナージュを実施。むくみが改善され、ウエスト周りがスッキリした様子。次回も同じメニューで継続予定。",
            "created_by": STAFF_ID,
            "created_at": "2024-01-25T10:00:00Z",
        },
        {
            "id": "visit-2",
            "client_id": "client-2",
            "visit_date": "2024-01-28",
            "service_menu": "ボディマッサージ",
            "notes": "リラックス効果抜群。肩こりが改善。",
            "created_by": ADMIN_ID,
            "created_at": "2024-01-28T14:00:00Z",
        },
    ],
    "measurements": [
        {
            "id": "measurement-1",
            "client_id": "client-1",
            "type": "weight",
            "value": 55.5,
            "measured_at": "2024-01-15T00:00:00Z",
            "created_by": STAFF_ID,
        },
        {
            "id": "measurement-2",
            "client_id": "client-1",
            "type": "weight",
            "value": 54.8,
            "measured_at": "2024-01-22T00:00:00Z",
            "created_by": STAFF_ID,
        },
        {
            "id": "measurement-3",
            "client_id": "client-1",
            "type": "weight",
            "value": 54.2,
            "measured_at": "2024-01-29T00:00:00Z",
            "created_by": STAFF_ID,
        },
    ],
}


def seed_tables() -> Dict[str, List[dict]]:
    """매번 새 사본을 돌려줘서 스토어끼리 row 객체를 공유하지 않게 한다."""
    return copy.deepcopy(SEED_TABLES)
