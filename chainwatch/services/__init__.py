"""Service layer: registries, price cache, aggregation, monitors and alert delivery"""
