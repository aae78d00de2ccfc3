"""Posts: model, data access, service and HTTP controller."""