"""
URL configuration for config project.

- /api/      REST-style JSON routes (habits.urls)
- /graphql/  the same operations as a GraphQL schema
"""
from django.contrib import admin
from django.urls import include, path
from django.views.decorators.csrf import csrf_exempt
from graphene_django.views import GraphQLView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('habits.urls')),
    path('graphql/', csrf_exempt(GraphQLView.as_view(graphiql=True))),
]
