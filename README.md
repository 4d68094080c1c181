# atreus

Service logic for a short-video platform, in three parts:

- `atreus.user` – registration, login, profile lookup and the per-user
  counters (follows, followers, works, favourites received and given).
- `atreus.comment` – posting, deleting and listing comments on a video, with
  comments stored in SQLite and each video's list cached in a Redis hash.
- `atreus.publish` – publishing videos, listing them by author or by id, and
  keeping each video's comment and favourite counts.

Each part has a `biz` module with the models and the use case, and a
`service` module that turns results and errors into reply dataclasses with a
`status_code` and `status_msg`. `atreus.user.data`, `atreus.publish.data` and
`atreus.comment.data` hold the storage.

Install with `pip install .`; the tests need the `test` extra.

## Storage

`atreus.db.Database(path=":memory:")` wraps an SQLite connection and can be
used as a context manager. `session()` returns the connection;
`begin()`, `commit()` and `rollback()` drive a transaction by hand;
`transaction()` is a context manager that commits on success and rolls back
when the block raises (inside an open transaction it uses a savepoint);
`action(func)` calls `func(connection)` inside `transaction()` and returns its
result. `atreus.db.Transaction(database).action(func)` does the same, passing
the `Database` itself to `func`.

## Users

```python
from atreus.user.biz import UserUsecase
from atreus.user.data import SqlUserRepo, new_database
from atreus.user.service import UserService

database = new_database(":memory:")
service = UserService(UserUsecase(SqlUserRepo(database)))

password = "password"
print(service.user_register("alice", password))
print(service.user_login("alice", password))
```

`UserService` replies with status code `0` and message `"success"`, or `300`
and the reason: a name already registered, an unknown user, a wrong password,
a token that fails to verify, or `"internal error"` when storage fails.
`get_user_info(user_id, token)` checks the token before looking the user up.

The counter updates (`update_follow`, `update_follower`, `update_favorited`,
`update_work`, `update_favorite`) take a signed change;
`atreus.user.data.calculate_valid_uint32` applies it so a counter stops at
zero going down and wraps as an unsigned 32-bit value going up.

`SqlUserRepo.update_info` rejects every change, since the editable fields
name no user, so `UserService.update_user_info` always answers with status
`300`.

## Tokens and passwords

`atreus.tokens.produce_token(user_id)` issues an HS256 token signed with
`atreus.tokens.JWT_SIGN_KEY` that expires after `JWT_EXPIRED` seconds (one
hour). `parse_token(token_key, token_string)` verifies a token and returns its
claims; `get_token_data(claims)` insists that they carry a `user_id`. Both
raise `atreus.tokens.TokenError`.

`atreus.passwords.gen_salt_password(salt, password)` returns the hex SHA-256
digest of the password's hex SHA-256 digest followed by the salt. Users are
stored with their name as the salt.

## Comments

`atreus.comment.biz.CommentUsecase(token_key, repo)` verifies the caller's
token, then lists a video's comments with `get_comment_list`, or with
`comment_action` creates a comment (`ActionType.CREATE`, 1) or deletes one
(`ActionType.DELETE`, 2) as the user named in the token. Any other action
type raises `ValueError`. `atreus.comment.service.CommentService` wraps these
in replies with status `0` and `"Success"`, or `-1` and the error message.

`atreus.comment.data.CommentStore(database, cache, user_client,
publish_client)` is the repository behind it:

- `cache` is a `redis.Redis` client; `new_redis_conn(addr, db, password,
  read_timeout, write_timeout)` opens one for a `host:port` address and raises
  `ConnectionError` if it does not answer a ping.
- `user_client` has `get_user_infos(user_ids)` and `publish_client` has
  `update_comment(video_id, comment_change)`; any objects with those methods
  will do.
- Creating and deleting a comment also moves the video's comment count
  through `publish_client`, in the same database transaction; only a
  comment's author, on its own video, may delete it.
- `get_comment_list` reads the Redis hash for the video when it has entries,
  otherwise reads the database and caches the result with an expiry of a
  random 360 to 720 minutes. Results are ordered by `sort_comments`: newest
  `MM-DD` date first.

## Videos

`atreus.publish.biz.PublishUsecase(repo)` publishes videos and reads them
back by author (`get_video_list_by_user_id`) or by id
(`get_video_list_by_ids`); `update_video_count(video_id, field, count)` moves
the `"favorite"` count of a video, or for any other field its comment count,
up or down. `atreus.publish.data.SqlPublishRepo(database)` stores the videos,
keeping counters as unsigned 32-bit values, and
`atreus.publish.service.PublishService` wraps the use case in replies with
status `0` or `-1`. Its `update_comment` and `update_favorite` let storage
errors propagate instead of replying with a failure.

## What the package does not do

- It runs no servers and has no commands: the service classes are plain
  Python objects for an application to call.
- It has no clients for reaching one part from another; `CommentStore` takes
  whatever user and publish clients it is given.
- Publishing stores no media. `atreus.publish.biz.auth` accepts every token
  as an anonymous user, `upload_video` returns empty play and cover URLs, and
  `SqlPublishRepo.find_user_by_id` returns a fixed placeholder author rather
  than a stored user.
- There is no feed: `get_video_list_by_count` always returns an empty list.
- Profile edits are not supported (see Users).