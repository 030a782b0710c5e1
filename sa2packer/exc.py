""" Errors

All of them signal a programming error: a mistake in a packer declaration, or in the way it's used.
They are raised as early as possible, preferably at import time, when packers are declared.
"""


class PackerError(Exception):
    """ Base for all sa2packer errors """


# region Declaration errors

class ModelNotYetDeclaredError(PackerError):
    """ A field is declared before the packer knows its model """


class ModelAlreadyDeclaredError(PackerError):
    """ Packer.set_model() is called on a packer that already has a model """


class DuplicateTraitError(PackerError):
    """ A trait with this name is already declared (maybe, on the packer this one extends) """


class FieldArgumentError(PackerError, ValueError):
    """ Invalid arguments given to field() """


class AssociationDoesNotExistError(PackerError):
    """ The model has no relationship with this name """


class InvalidAssociationPackerError(PackerError):
    """ The packer given for a relationship can't be used for it """


class UnknownTraitError(PackerError):
    """ The packer has no trait with this name """


class MissingTraitBlockError(PackerError, TypeError):
    """ A trait is declared without a setup function """


class ContextInTraitError(PackerError):
    """ with_context() used on a packer instance: the context is already available there """

# endregion


# region Eager hash errors

class EagerArgumentError(PackerError, TypeError):
    """ eager() got something that's neither an association name, a list, nor a dict """


class MixedProcHashError(PackerError):
    """ An eager hash can't mix association names with a filter callable on the same level:

        {'assoc1': 'nested', <callable>: 'assoc2'}
    """


class MultipleProcKeysError(PackerError):
    """ An eager hash can't have more than one filter callable on the same level """


class NestedEagerProcsError(PackerError):
    """ A filter callable can't point to another filter callable: there has to be an association in between """

# endregion


# region Loading errors

class DetachedEntityError(PackerError):
    """ An entity has to be loaded from the database, but it has no Session to do it """

# endregion
