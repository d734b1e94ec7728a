from graphql import GraphQLBoolean, GraphQLFloat, GraphQLID, GraphQLInt, GraphQLScalarType, GraphQLString

BUILTIN_SCALARS: dict[str, GraphQLScalarType] = {
    "ID": GraphQLID,
    "String": GraphQLString,
    "Int": GraphQLInt,
    "Float": GraphQLFloat,
    "Boolean": GraphQLBoolean,
}


def is_introspection_type(type_name: str) -> bool:
    return type_name.startswith("__")


def is_root_type(type_name: str) -> bool:
    return type_name in {
        "Query",
        "Mutation",
        "Subscription",
    }


def is_builtin_scalar_type(type_name: str) -> bool:
    return type_name in BUILTIN_SCALARS


def is_graphql_system_type(type_name: str) -> bool:
    return is_introspection_type(type_name) or is_root_type(type_name) or is_builtin_scalar_type(type_name)
