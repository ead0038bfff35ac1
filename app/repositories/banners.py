"""Repository for banners."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.banner import Banner


class BannerRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_id(self, id_banner: int) -> Banner | None:
        return self.db.get(Banner, id_banner)

    def find_all(self) -> list[Banner]:
        stmt = select(Banner).order_by(Banner.fecha_creacion.desc(), Banner.id_banner.desc())
        return list(self.db.execute(stmt).scalars())

    def create(self, url: str) -> Banner:
        banner = Banner(banner=url)
        self.db.add(banner)
        self.db.flush()
        return banner

    def delete(self, id_banner: int) -> bool:
        result = self.db.execute(delete(Banner).where(Banner.id_banner == id_banner))
        return (result.rowcount or 0) > 0
