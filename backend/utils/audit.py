from sqlalchemy.orm import Session
from models.log import Log

def write_log(db: Session, *, actor_email, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(actor_email=actor_email, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
