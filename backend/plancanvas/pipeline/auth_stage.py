from typing import List

from plancanvas.ir import NodeKind, StageId
from plancanvas.ir.stage_data import AuthData
from plancanvas.pipeline.stage import Entity, StageReconciler


class AuthReconciler(StageReconciler):
    stage = StageId.AUTH
    model = AuthData

    def entities(self, data: AuthData) -> List[Entity]:
        entities = []

        # Only switched-on methods and features are drawn
        methods = [m for m in data.auth_methods if m.enabled]
        if methods:
            entities.append(Entity(NodeKind.AUTH_METHODS, methods))

        if data.user_roles:
            entities.append(Entity(NodeKind.USER_ROLES, list(data.user_roles)))

        security = [f for f in data.security_features if f.enabled]
        if security:
            entities.append(Entity(NodeKind.SECURITY_FEATURES, security))

        return entities
