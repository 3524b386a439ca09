"""Sales domain - recording visits, pricing, discounts and loyalty"""
