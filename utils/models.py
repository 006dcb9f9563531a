from datetime import datetime, date

from sqlmodel import SQLModel


class ArenaSQLModel(SQLModel):
    """
    针对字段类型为日期时间的序列化操作进一步封装。
    """

    def model_dump(self, *args, **kwargs) -> dict:
        dump = super().model_dump(*args, **kwargs)
        for k, v in dump.items():
            if isinstance(v, datetime):
                dump[k] = v.strftime("%Y-%m-%d %H:%M:%S")
            elif isinstance(v, date):
                dump[k] = v.strftime("%Y-%m-%d")
        return dump
