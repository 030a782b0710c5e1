""" Test the code from README """

# models.py
import pytest
import sqlalchemy as sa
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import declarative_base, relationship, Session


# SqlAlchemy models
Base = declarative_base()


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    posts = relationship(lambda: Post, back_populates='author')


class Post(Base):
    __tablename__ = 'posts'

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    published = Column(Boolean, nullable=False, default=True)

    author_id = Column(ForeignKey(User.id))
    author = relationship(User, back_populates='posts')

    comments = relationship(lambda: Comment)
    likes = relationship(lambda: Like)


class Comment(Base):
    __tablename__ = 'comments'

    id = Column(Integer, primary_key=True)
    post_id = Column(ForeignKey(Post.id))
    content = Column(String)


class Like(Base):
    __tablename__ = 'likes'

    id = Column(Integer, primary_key=True)
    post_id = Column(ForeignKey(Post.id))


class models:
    """ Namespace that imitates a module """
    User = User
    Post = Post
    Comment = Comment
    Like = Like


@pytest.fixture()
def sqlite_session():  # overrides the one from ./conftest.py: README models have their own Base
    from .db import database_session
    with database_session(Base) as ssn:
        yield ssn


def test_declaring_a_packer(sqlite_session: Session):
    class packers:  # fake module
        from sa2packer import Packer

        CommentPacker = Packer(models.Comment)
        CommentPacker.field('id')
        CommentPacker.field('content')

        PostPacker = Packer(models.Post)
        PostPacker.field('id')
        PostPacker.field('title')

        # A trait: only used when asked for
        @PostPacker.trait('with_comments')
        def with_comments(p):
            p.field('comments', packers.CommentPacker)

        UserPacker = Packer(models.User)
        UserPacker.field('id')
        UserPacker.field('name', lambda user: user.name.title())
        UserPacker.field('posts', PostPacker, 'with_comments')

        # An arbitrary field: modify the output any way you like
        UserPacker.field(lambda user, output: output.update(initials=user.name[:1]))

    # === Use
    ssn = sqlite_session
    ssn.add(models.User(id=1, name='paul', posts=[models.Post(id=10, title='A')]))
    ssn.commit()

    assert packers.UserPacker.pack(ssn.query(models.User)) == [
        {'id': 1, 'name': 'Paul', 'posts': [{'id': 10, 'title': 'A', 'comments': []}], 'initials': 'p'},
    ]

    user = ssn.get(models.User, 1)
    assert packers.UserPacker.pack(user)['id'] == 1
    assert packers.UserPacker.pack(None) is None


def test_eager_loading_with_filters(sqlite_session: Session):
    from sa2packer import Packer

    PostPacker = Packer(models.Post)
    PostPacker.field('title')

    UserPacker = Packer(models.User)
    UserPacker.field('posts', PostPacker)

    @UserPacker.trait('published_posts')
    def published_posts(p):
        p.eager({'posts': lambda stmt: stmt.where(models.Post.published == True)})

    # === Use
    ssn = sqlite_session
    ssn.add(models.User(id=1, name='paul', posts=[
        models.Post(title='A'),
        models.Post(title='B', published=False),
    ]))
    ssn.commit()

    assert UserPacker.pack(ssn.query(models.User), 'published_posts') == [{'posts': [{'title': 'A'}]}]

    ssn.expire_all()
    assert UserPacker.pack(ssn.query(models.User)) == [{'posts': [{'title': 'A'}, {'title': 'B'}]}]


def test_context_and_precomputations(sqlite_session: Session):
    from sa2packer import Packer

    def count_likes_for(posts):
        ssn = sa.orm.object_session(posts[0])
        return dict(
            ssn.query(models.Like.post_id, sa.func.count())
            .filter(models.Like.post_id.in_([post.id for post in posts]))
            .group_by(models.Like.post_id)
        )

    PostPacker = Packer(models.Post)
    PostPacker.field('id')

    @PostPacker.with_context
    def is_mine(p):
        me = p.context['me']
        p.field('is_mine', lambda post: post.author_id == me.id)

    @PostPacker.trait('like_count')
    def like_count(p):
        @p.precompute
        def count_likes(p, posts):
            p.scratch['likes'] = count_likes_for(posts)  # one query for all posts

        p.field('like_count', lambda post: p.scratch['likes'].get(post.id, 0))

    # === Use
    ssn = sqlite_session
    paul, julius = models.User(name='paul'), models.User(name='julius')
    ssn.add_all([
        models.Post(id=1, title='A', author=paul, likes=[models.Like(), models.Like()]),
        models.Post(id=2, title='B', author=julius),
    ])
    ssn.commit()

    posts = ssn.query(models.Post).order_by(models.Post.id).all()
    assert PostPacker.pack(posts, 'like_count', me=paul) == [
        {'id': 1, 'is_mine': True, 'like_count': 2},
        {'id': 2, 'is_mine': False, 'like_count': 0},
    ]
