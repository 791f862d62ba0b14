from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union
from sqlmodel import SQLModel, func, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import BaseModel

T = TypeVar("T", bound=SQLModel)

# Signed 64-bit INTEGER range of the primary key column
MIN_ITEM_ID = -(2**63)
MAX_ITEM_ID = 2**63 - 1


class RepositoryError(Exception):
    """Custom exception for repository errors."""

    pass


class BaseRepository(Generic[T]):
    model: Type[T]
    # Columns applied to every multi-row read, e.g. (Post.created_at.desc(),)
    default_order: Sequence[Any] = ()

    def __init__(self, get_session: Callable[..., AsyncSession]):
        self.get_session = get_session

    def _handle_db_error(self, error: SQLAlchemyError, operation: str) -> None:
        """Handle database errors and raise appropriate exceptions."""
        if isinstance(error, IntegrityError):
            raise RepositoryError(
                f"Database integrity error during {operation}: {error}"
            ) from error
        else:
            raise RepositoryError(
                f"Database error during {operation}: {error}"
            ) from error

    def _build_select_stmt(self, *conditions: Any, **filters) -> Any:
        """Build select statement from typed conditions and equality filters."""
        stmt = select(self.model)

        for condition in conditions:
            stmt = stmt.where(condition)

        columns = self.model.__table__.columns.keys()  # type: ignore
        for field, value in filters.items():
            if field not in columns:
                raise RepositoryError(
                    f"{self.model.__name__} has no field '{field}' to filter on"
                )
            stmt = stmt.where(getattr(self.model, field) == value)

        return stmt

    @staticmethod
    def _storable_id(item_id: Any) -> bool:
        """IDs outside the key column range cannot match any row."""
        return isinstance(item_id, int) and MIN_ITEM_ID <= item_id <= MAX_ITEM_ID

    def _ordered(self, stmt: Any) -> Any:
        if self.default_order:
            stmt = stmt.order_by(*self.default_order)
        return stmt

    # ----------------- READ ----------------- #
    async def get(self, item_id: Any) -> Optional[T]:
        """Get a single item by ID."""
        if not self._storable_id(item_id):
            return None
        async with self.get_session() as db:
            try:
                return await db.get(self.model, item_id)
            except SQLAlchemyError as e:
                self._handle_db_error(e, "get")

    async def get_many(
        self,
        *conditions: Any,
        skip: int = 0,
        limit: Optional[int] = None,
        **filters,
    ) -> List[T]:  # type:ignore
        """Get multiple items with filtering and optional limit."""
        async with self.get_session() as db:
            try:
                stmt = self._ordered(self._build_select_stmt(*conditions, **filters))
                if skip:
                    stmt = stmt.offset(skip)
                if limit is not None:
                    stmt = stmt.limit(limit)

                result = await db.exec(stmt)
                return list(result.all())
            except SQLAlchemyError as e:
                self._handle_db_error(e, "get_many")

    async def get_by_ids(self, item_ids: List[Any]) -> List[T]:  # type:ignore
        """Fetch every item whose ID is in item_ids with a single query."""
        item_ids = [item_id for item_id in item_ids if self._storable_id(item_id)]
        if not item_ids:
            return []
        return await self.get_many(self.model.id.in_(item_ids))  # type: ignore

    async def list(
        self,
        *conditions: Any,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
        **filters,
    ) -> Dict[str, Any]:  # type:ignore
        """Get items plus paging metadata.

        Without page or per_page every matching item is returned as one page.
        """
        paginate = page is not None or per_page is not None
        page = page if page and page >= 1 else 1
        if per_page is not None and not 1 <= per_page <= 100:
            per_page = 10
        elif per_page is None and paginate:
            per_page = 10

        async with self.get_session() as db:
            try:
                stmt = self._build_select_stmt(*conditions, **filters)

                count_stmt = select(func.count()).select_from(stmt.subquery())
                total_result = await db.exec(count_stmt)
                total = total_result.one()

                page_stmt = self._ordered(stmt)
                if paginate:
                    page_stmt = page_stmt.offset((page - 1) * per_page).limit(per_page)
                result = await db.exec(page_stmt)
                items = list(result.all())

                if not paginate:
                    per_page = max(total, 1)
                pages = (total + per_page - 1) // per_page  # Ceiling division

                return {
                    "items": items,
                    "total": total,
                    "page": page,
                    "per_page": per_page,
                    "pages": pages,
                }
            except SQLAlchemyError as e:
                self._handle_db_error(e, "list")

    async def exists(self, item_id: Any) -> bool:  # type:ignore
        """Check if an item exists."""
        if not self._storable_id(item_id):
            return False
        async with self.get_session() as db:
            try:
                stmt = select(self.model.id).where(self.model.id == item_id)  # type: ignore
                result = await db.exec(stmt)
                return result.first() is not None
            except SQLAlchemyError as e:
                self._handle_db_error(e, "exists")

    # ----------------- WRITE ----------------- #
    async def create(
        self, obj_in: Union[Dict[str, Any], BaseModel]
    ) -> T:  # type:ignore
        """Create a new item in a single insert."""
        if isinstance(obj_in, BaseModel):
            obj_in = obj_in.model_dump(exclude_unset=True)

        async with self.get_session() as db:
            try:
                obj = self.model(**obj_in)  # type: ignore
                db.add(obj)
                await db.commit()
                await db.refresh(obj)
                return obj
            except SQLAlchemyError as e:
                await db.rollback()
                self._handle_db_error(e, "create")

    async def update(
        self,
        item_id: Any,
        obj_in: Union[Dict[str, Any], BaseModel],
        exclude_unset: bool = True,
    ) -> Optional[T]:
        """Update an existing item."""
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=exclude_unset)
        else:
            update_data = dict(obj_in)

        # Remove ID from update data to prevent changing primary key
        update_data.pop("id", None)

        if not update_data:
            raise RepositoryError("No data provided for update")
        if not self._storable_id(item_id):
            return None

        async with self.get_session() as db:
            try:
                db_obj = await db.get(self.model, item_id)
                if not db_obj:
                    return None

                for key, value in update_data.items():
                    if hasattr(db_obj, key):
                        setattr(db_obj, key, value)

                await db.commit()
                await db.refresh(db_obj)
                return db_obj
            except SQLAlchemyError as e:
                await db.rollback()
                self._handle_db_error(e, "update")

    async def update_many(
        self, changes: Dict[Any, Dict[str, Any]]
    ) -> List[T]:  # type:ignore
        """Apply per-item changes ({id: {field: value}}) in one transaction.

        Either every row is updated or none is: a missing ID or a database
        error rolls the whole batch back.
        """
        if not changes:
            raise RepositoryError("No data provided for update")

        async with self.get_session() as db:
            try:
                result = await db.exec(
                    select(self.model).where(self.model.id.in_(list(changes)))  # type: ignore
                )
                objects = {obj.id: obj for obj in result.all()}  # type: ignore

                missing = [item_id for item_id in changes if item_id not in objects]
                if missing:
                    await db.rollback()
                    raise RepositoryError(
                        f"{self.model.__name__} not found for ids {missing}"
                    )

                for item_id, update_data in changes.items():
                    db_obj = objects[item_id]
                    for key, value in update_data.items():
                        if key != "id" and hasattr(db_obj, key):
                            setattr(db_obj, key, value)

                await db.commit()
                for obj in objects.values():
                    await db.refresh(obj)
                return [objects[item_id] for item_id in changes]
            except SQLAlchemyError as e:
                await db.rollback()
                self._handle_db_error(e, "update_many")

    async def delete(self, item_id: Any) -> bool:  # type:ignore
        """Permanently delete the item from DB."""
        if not self._storable_id(item_id):
            return False
        async with self.get_session() as db:
            try:
                db_obj = await db.get(self.model, item_id)
                if not db_obj:
                    return False

                await db.delete(db_obj)
                await db.commit()
                return True
            except SQLAlchemyError as e:
                await db.rollback()
                self._handle_db_error(e, "delete")
