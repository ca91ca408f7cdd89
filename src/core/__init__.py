"""
Core ledger value types, stable hashing, storage columns and contracts.

Модули не зависят от внешних систем (ledger reader, БД): хранилище
подключается через SQLAlchemy TypeDecorator'ы из src.core.storage.
"""
