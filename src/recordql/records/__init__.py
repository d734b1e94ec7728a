from recordql.records.model import ModelCreator, RecordModel
from recordql.records.record import Record, RecordList
from recordql.records.store import InMemoryRecordStore, RecordStore

__all__ = ["InMemoryRecordStore", "ModelCreator", "Record", "RecordList", "RecordModel", "RecordStore"]
