"""
Command Surface

One method per supported command. Each method only shapes its arguments
and hands them to execute_command(), so the same surface serves:

    RespClient   -> sends immediately, returns the reply Value
    Pipeline     -> queues the command, returns the pipeline
    Transaction  -> queues the command inside MULTI/EXEC
"""

from typing import Dict, Optional


class CommandsMixin:
    """Convenience wrappers around execute_command()."""

    def execute_command(self, name, *args):
        raise NotImplementedError

    # Connection

    def ping(self, message=None):
        if message is None:
            return self.execute_command("PING")
        return self.execute_command("PING", message)

    def echo(self, message):
        return self.execute_command("ECHO", message)

    # Strings

    def get(self, key):
        return self.execute_command("GET", key)

    def set(
        self,
        key,
        value,
        ex: Optional[int] = None,
        px: Optional[int] = None,
        nx: bool = False,
        xx: bool = False,
    ):
        """SET key value [EX seconds | PX milliseconds] [NX | XX]"""
        args = [key, value]
        if ex is not None:
            args.extend(("EX", ex))
        if px is not None:
            args.extend(("PX", px))
        if nx:
            args.append("NX")
        if xx:
            args.append("XX")
        return self.execute_command("SET", *args)

    def getset(self, key, value):
        return self.execute_command("GETSET", key, value)

    def mget(self, *keys):
        return self.execute_command("MGET", *keys)

    def mset(self, mapping: Dict):
        args = []
        for key, value in mapping.items():
            args.extend((key, value))
        return self.execute_command("MSET", *args)

    def delete(self, *keys):
        return self.execute_command("DEL", *keys)

    def exists(self, *keys):
        return self.execute_command("EXISTS", *keys)

    def incr(self, key):
        return self.execute_command("INCR", key)

    def incrby(self, key, amount: int):
        return self.execute_command("INCRBY", key, amount)

    def decr(self, key):
        return self.execute_command("DECR", key)

    def decrby(self, key, amount: int):
        return self.execute_command("DECRBY", key, amount)

    def append(self, key, value):
        return self.execute_command("APPEND", key, value)

    def strlen(self, key):
        return self.execute_command("STRLEN", key)

    # Keys

    def expire(self, key, seconds: int):
        return self.execute_command("EXPIRE", key, seconds)

    def ttl(self, key):
        return self.execute_command("TTL", key)

    def persist(self, key):
        return self.execute_command("PERSIST", key)

    def keys(self, pattern="*"):
        return self.execute_command("KEYS", pattern)

    def type(self, key):
        return self.execute_command("TYPE", key)

    def flushdb(self):
        return self.execute_command("FLUSHDB")

    # Hashes

    def hset(self, key, field, value):
        return self.execute_command("HSET", key, field, value)

    def hget(self, key, field):
        return self.execute_command("HGET", key, field)

    def hgetall(self, key):
        return self.execute_command("HGETALL", key)

    def hdel(self, key, *fields):
        return self.execute_command("HDEL", key, *fields)

    def hexists(self, key, field):
        return self.execute_command("HEXISTS", key, field)

    def hlen(self, key):
        return self.execute_command("HLEN", key)

    # Lists

    def lpush(self, key, *values):
        return self.execute_command("LPUSH", key, *values)

    def rpush(self, key, *values):
        return self.execute_command("RPUSH", key, *values)

    def lpop(self, key):
        return self.execute_command("LPOP", key)

    def rpop(self, key):
        return self.execute_command("RPOP", key)

    def lrange(self, key, start: int, stop: int):
        return self.execute_command("LRANGE", key, start, stop)

    def llen(self, key):
        return self.execute_command("LLEN", key)

    # Sets

    def sadd(self, key, *members):
        return self.execute_command("SADD", key, *members)

    def srem(self, key, *members):
        return self.execute_command("SREM", key, *members)

    def smembers(self, key):
        return self.execute_command("SMEMBERS", key)

    def sismember(self, key, member):
        return self.execute_command("SISMEMBER", key, member)

    def scard(self, key):
        return self.execute_command("SCARD", key)

    # Sorted sets

    def zadd(self, key, mapping: Dict):
        """ZADD key score member [score member ...], mapping is member -> score."""
        args = []
        for member, score in mapping.items():
            args.extend((score, member))
        return self.execute_command("ZADD", key, *args)

    def zrange(self, key, start: int, stop: int, withscores: bool = False):
        if withscores:
            return self.execute_command("ZRANGE", key, start, stop, "WITHSCORES")
        return self.execute_command("ZRANGE", key, start, stop)

    def zscore(self, key, member):
        return self.execute_command("ZSCORE", key, member)

    # Optimistic locking

    def watch(self, *keys):
        return self.execute_command("WATCH", *keys)

    def unwatch(self):
        return self.execute_command("UNWATCH")
