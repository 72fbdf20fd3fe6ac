"""Trip cost engine — multi-stop road vs flight costing for field technicians.

Modules:
    config            Frozen defaults and per-request overrides
    models            Value objects: stops, legs, rates, options, breakdown
    route_optimizer   Nearest-neighbour stop ordering and leg building
    day_count         Calendar days per travel mode (small state machine)
    allowances        Statutory per-diem breakdown
    road_option       Driving cost: time, mileage, tolls, allowances, hotel
    flight_option     Flying cost: tickets, rental car, fuel, ground transport
    recommendation    Trip fees and the road-vs-flight decision
    allocation        Per-customer split of shared costs
    engine            TripCostEngine orchestrating one request

Pipeline:
    RouteOptimizer → build_legs → evaluate_road ∥ FlightOptionEvaluator
    → apply_fees → recommend → allocate_costs
"""
