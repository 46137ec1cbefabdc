import logging
from supabase import Client
from safebite.modules.locations.schemas import LocationCreate, LocationUpdate, LocationResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class LocationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_location(self, location_data: LocationCreate) -> LocationResponse:
        """Create a new location under a company"""
        try:
            if not location_data.name.strip():
                raise HTTPException(status_code=400, detail="Location name is required")

            company_result = self.supabase.table("companies")\
                .select("id")\
                .eq("id", location_data.company_id)\
                .limit(1)\
                .execute()
            if not company_result.data:
                raise HTTPException(status_code=404, detail="Company not found")

            result = self.supabase.table("locations").insert(location_data.model_dump()).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create location")

            return LocationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating location: {e}")
            raise HTTPException(status_code=500, detail="Failed to create location")

    def get_location_by_id(self, location_id: str) -> LocationResponse:
        """Get location by ID"""
        try:
            result = self.supabase.table("locations")\
                .select("*")\
                .eq("id", location_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Location not found")

            return LocationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load location")

    def list_locations(
        self,
        company_ids: Optional[List[str]] = None,
        location_ids: Optional[List[str]] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[LocationResponse]:
        """
        List locations ordered by name.
        company_ids / location_ids restrict the result unless None; an empty list matches nothing.
        """
        try:
            if company_ids is not None and len(company_ids) == 0:
                return []
            if location_ids is not None and len(location_ids) == 0:
                return []
            query = self.supabase.table("locations").select("*")
            if company_ids is not None:
                query = query.in_("company_id", company_ids)
            if location_ids is not None:
                query = query.in_("id", location_ids)
            result = query.order("name")\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [LocationResponse(**location) for location in result.data]
        except Exception as e:
            logger.error(f"Error listing locations: {e}")
            raise HTTPException(status_code=500, detail="Failed to list locations")

    def update_location(self, location_id: str, location_data: LocationUpdate) -> LocationResponse:
        """Update location"""
        try:
            update_data = location_data.model_dump(exclude_none=True)
            if "name" in update_data and not update_data["name"].strip():
                raise HTTPException(status_code=400, detail="Location name is required")
            if not update_data:
                return self.get_location_by_id(location_id)

            result = self.supabase.table("locations")\
                .update(update_data)\
                .eq("id", location_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Location not found")

            return LocationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update location")

    def delete_location(self, location_id: str) -> bool:
        """Delete location"""
        try:
            result = self.supabase.table("locations")\
                .delete()\
                .eq("id", location_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete location")
