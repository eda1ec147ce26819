"""Root GraphQL schema served at /graphql/; mirrors the REST routes under /api/."""
import graphene

from habits.schema import Query as HabitsQuery, Mutation as HabitsMutation


class Query(HabitsQuery, graphene.ObjectType):
    pass


class Mutation(HabitsMutation, graphene.ObjectType):
    pass


schema = graphene.Schema(query=Query, mutation=Mutation, auto_camelcase=True)
