from app.database import SessionLocal, init_db
from app.models.leave_type import LeaveType

DEFAULT_LEAVE_TYPES = [
    {"name": "Annual Leave", "code": "AL", "color": "#3B82F6", "icon": "sun",
     "requires_approval": True, "max_days_per_request": None, "sort_order": 1},
    {"name": "Sick Leave", "code": "SL", "color": "#EF4444", "icon": "thermometer",
     "requires_approval": False, "max_days_per_request": 5, "sort_order": 2},
    {"name": "Personal Leave", "code": "PL", "color": "#8B5CF6", "icon": "user",
     "requires_approval": True, "max_days_per_request": 3, "sort_order": 3},
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        for data in DEFAULT_LEAVE_TYPES:
            existing = db.query(LeaveType).filter(LeaveType.code == data["code"]).first()
            if existing:
                print(f"Leave type {data['code']} already exists, skipping")
                continue
            db.add(LeaveType(is_active=True, **data))
            print(f"Created leave type {data['code']} ({data['name']})")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
