"""Convert ORM rows into camelCase response dicts."""
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.derivations import full_name, gravatar_url
from newsdesk.models import Article, Comment, User
from newsdesk.schemas import ArticleResponse, AuthorResponse, CommentResponse, UserResponse
from newsdesk.services import user_service


def dump(model) -> dict:
    return model.model_dump(by_alias=True, mode="json")


def user_model(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=full_name(user.first_name, user.last_name),
        email=user.email,
        avatar=user.avatar,
        gravatar_url=gravatar_url(user.email),
        bio=user.bio,
        website=user.website,
        twitter=user.twitter,
        instagram=user.instagram,
        facebook=user.facebook,
        role=user.role,
        email_verified=user.email_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login=user.last_login,
    )


def user_to_dict(user: User) -> dict:
    return dump(user_model(user))


def author_model(user: User) -> AuthorResponse:
    return AuthorResponse(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=full_name(user.first_name, user.last_name),
        avatar=user.avatar,
        gravatar_url=gravatar_url(user.email),
        role=user.role,
        created_at=user.created_at,
    )


def article_to_dict(article: Article) -> dict:
    return dump(ArticleResponse.model_validate(article))


def _comment_to_dict(comment: Comment, author: User | None) -> dict:
    return dump(
        CommentResponse(
            id=comment.id,
            article_id=comment.article_id,
            user_id=comment.user_id,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            user=author_model(author) if author is not None else None,
        )
    )


async def comments_to_dicts(db: AsyncSession, comments: list[Comment]) -> list[dict]:
    """Serialise *comments*, resolving every author with a single query."""
    authors = await user_service.get_users_by_ids(db, {c.user_id for c in comments})
    return [_comment_to_dict(c, authors.get(c.user_id)) for c in comments]


async def comment_to_dict(db: AsyncSession, comment: Comment) -> dict:
    return (await comments_to_dicts(db, [comment]))[0]
