"""SQLite persistence: transactions, receipt item rows and learned category mappings."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, Session, declarative_base, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from kassa.domain.receipt import ReceiptItem
from kassa.domain.transaction import TransactionIntent
from kassa.runtime.logging import get_logger
from kassa.runtime.paths import get_paths

logger = get_logger(__name__)

Base = declarative_base()

# Free-text comments longer than this are not worth remembering as keywords.
MAX_COMMENT_KEY_LENGTH = 50


class TransactionModel(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(Integer, index=True)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str | None] = mapped_column(String(120))
    tag: Mapped[str | None] = mapped_column(String(120))
    comment: Mapped[str | None] = mapped_column(Text)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    source_account: Mapped[str | None] = mapped_column(String(120))
    target_account: Mapped[str | None] = mapped_column(String(120))


class ReceiptItemModel(Base):
    __tablename__ = "receipt_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(ForeignKey("transactions.id", ondelete="CASCADE"), index=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[float] = mapped_column(Float, default=1)
    shop_name: Mapped[str | None] = mapped_column(String(255))
    date: Mapped[str] = mapped_column(String(32), nullable=False)


class ProductMappingModel(Base):
    __tablename__ = "product_mappings"

    raw_name: Mapped[str] = mapped_column(Text, primary_key=True)
    category: Mapped[str] = mapped_column(String(120), nullable=False)


class KeywordModel(Base):
    __tablename__ = "keywords"

    keyword: Mapped[str] = mapped_column(Text, primary_key=True)
    category: Mapped[str] = mapped_column(String(120), nullable=False)


SessionFactory = Callable[[], Session]


def normalize_key(text: str) -> str:
    """Mapping keys are trimmed and lower-cased."""
    return text.strip().lower()


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create the engine and make sure all tables exist."""
    url = database_url or get_paths().database_url
    kwargs: dict = {}
    if url.startswith("sqlite"):
        # Bot handlers run blocking DB calls on worker threads.
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            get_paths().data.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(engine)
    logger.debug("Database ready at %s", engine.url)
    return engine


def create_session_factory(database_url: str | None = None) -> SessionFactory:
    return sessionmaker(bind=create_db_engine(database_url), autocommit=False, autoflush=False)


def _upsert(session_factory: SessionFactory, row: ProductMappingModel | KeywordModel) -> None:
    """Last write wins; a concurrent insert of the same key is retried as an update."""
    for attempt in range(2):
        with session_factory() as session:
            try:
                session.merge(row)
                session.commit()
                return
            except IntegrityError:
                session.rollback()
                if attempt:
                    raise


class SqlCategoryLearningStore:
    """Product-name -> category and comment -> category maps."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def lookup_product_category(self, name: str) -> str | None:
        key = normalize_key(name)
        if not key:
            return None
        with self._session_factory() as session:
            row = session.get(ProductMappingModel, key)
            return row.category if row else None

    def learn_product_category(self, name: str, category: str) -> None:
        key = normalize_key(name)
        if not key:
            return
        _upsert(self._session_factory, ProductMappingModel(raw_name=key, category=category))
        logger.debug("Learned product %r -> %s", key, category)

    def lookup_comment_category(self, text: str) -> str | None:
        key = normalize_key(text)
        if not key:
            return None
        with self._session_factory() as session:
            row = session.get(KeywordModel, key)
            return row.category if row else None

    def learn_comment_category(self, text: str, category: str) -> None:
        key = normalize_key(text)
        if not key or len(key) > MAX_COMMENT_KEY_LENGTH:
            return
        _upsert(self._session_factory, KeywordModel(keyword=key, category=category))
        logger.info("Learned keyword %r -> %s", key, category)

    def product_mappings(self) -> dict[str, str]:
        with self._session_factory() as session:
            rows = session.scalars(select(ProductMappingModel)).all()
            return {row.raw_name: row.category for row in rows}


class SqlTransactionRecorder:
    """Persistence collaborator for finalized transactions."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def record_transaction(self, intent: TransactionIntent, user_id: int | None = None) -> int:
        with self._session_factory() as session:
            row = TransactionModel(
                user_id=user_id,
                type=intent.type,
                amount=float(intent.amount),
                category=intent.category,
                tag=intent.tag,
                comment=intent.comment,
                date=intent.date or datetime.now().isoformat(timespec="seconds"),
                source_account=intent.source_account,
                target_account=intent.target_account,
            )
            session.add(row)
            session.commit()
            logger.info("Recorded %s %s (%s) as transaction %d", intent.type, intent.amount, intent.category, row.id)
            return row.id

    def record_receipt_items(
        self,
        transaction_id: int,
        shop_name: str,
        items: Sequence[ReceiptItem],
        date: str | None = None,
    ) -> None:
        item_date = date or datetime.now().isoformat(timespec="seconds")
        with self._session_factory() as session:
            session.add_all(
                ReceiptItemModel(
                    transaction_id=transaction_id,
                    item_name=item.name,
                    price=float(item.price),
                    quantity=1,
                    shop_name=shop_name,
                    date=item_date,
                )
                for item in items
            )
            session.commit()

    def list_transactions(self, user_id: int | None = None) -> list[TransactionModel]:
        with self._session_factory() as session:
            query = select(TransactionModel).order_by(TransactionModel.id)
            if user_id is not None:
                query = query.where(TransactionModel.user_id == user_id)
            return list(session.scalars(query).all())

    def list_receipt_items(self, transaction_id: int) -> list[ReceiptItemModel]:
        with self._session_factory() as session:
            query = select(ReceiptItemModel).where(ReceiptItemModel.transaction_id == transaction_id)
            return list(session.scalars(query.order_by(ReceiptItemModel.id)).all())
