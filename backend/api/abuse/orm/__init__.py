from api.abuse.orm.abuse_model import AbuseModel

__all__ = ["AbuseModel"]
