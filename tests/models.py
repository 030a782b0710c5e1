""" Models for testing """
import sqlalchemy as sa
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class User(Base):
    __tablename__ = 'users'

    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String, nullable=False)

    posts = relationship(lambda: Post, back_populates='author')
    likes = relationship(lambda: Like, back_populates='liker')
    liked_posts = relationship(lambda: Post, secondary=lambda: Like.__table__, viewonly=True)

    @property
    def name_length(self) -> int:
        return len(self.name)


class Post(Base):
    __tablename__ = 'posts'

    id = sa.Column(sa.Integer, primary_key=True)
    author_id = sa.Column(sa.ForeignKey(User.id, ondelete='CASCADE'), nullable=False)
    title = sa.Column(sa.String)
    content = sa.Column(sa.String)

    author = relationship(User, back_populates='posts')
    comments = relationship(lambda: Comment, back_populates='post')
    likes = relationship(lambda: Like, back_populates='post')


class Comment(Base):
    __tablename__ = 'comments'

    id = sa.Column(sa.Integer, primary_key=True)
    commenter_id = sa.Column(sa.ForeignKey(User.id, ondelete='CASCADE'), nullable=False)
    post_id = sa.Column(sa.ForeignKey(Post.id, ondelete='CASCADE'), nullable=False)
    parent_id = sa.Column(sa.ForeignKey('comments.id', ondelete='CASCADE'))
    content = sa.Column(sa.String)

    commenter = relationship(User)
    post = relationship(Post, back_populates='comments')
    parent = relationship(lambda: Comment, remote_side=lambda: Comment.id, back_populates='replies')
    replies = relationship(lambda: Comment, back_populates='parent', order_by=lambda: Comment.id.desc())


class Like(Base):
    __tablename__ = 'likes'

    id = sa.Column(sa.Integer, primary_key=True)
    liker_id = sa.Column(sa.ForeignKey(User.id, ondelete='CASCADE'), nullable=False)
    post_id = sa.Column(sa.ForeignKey(Post.id))
    comment_id = sa.Column(sa.ForeignKey(Comment.id))

    liker = relationship(User, back_populates='likes')
    post = relationship(Post, back_populates='likes')
    comment = relationship(Comment)


# region: Inheritance

class Team(Base):
    __tablename__ = 'teams'
    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String(50))

    members = relationship(lambda: Employee, back_populates='team')
    engineers = relationship(lambda: Engineer, viewonly=True)


class Employee(Base):
    __tablename__ = 'employees'
    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.String(50))
    type = sa.Column(sa.String(50))

    team_id = sa.Column(sa.ForeignKey(Team.id))
    team = relationship(Team, back_populates='members')

    __mapper_args__ = {
        'polymorphic_identity': 'employee',
        'polymorphic_on': type
    }


class Engineer(Employee):
    engineer_info = sa.Column(sa.String(50))

    __mapper_args__ = {
        'polymorphic_identity': 'engineer'
    }

# endregion
