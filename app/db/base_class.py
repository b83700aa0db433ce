# /markhub-backend/app/db/base_class.py

from sqlalchemy.orm import declarative_base, declared_attr


class _Base:
    # Models get a pluralised table name unless they declare one themselves.
    @declared_attr
    def __tablename__(cls) -> str:
        return f"{cls.__name__.lower()}s"


Base = declarative_base(cls=_Base)
